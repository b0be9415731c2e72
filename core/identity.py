"""
Identity Resolver：把顯示名稱對應到房間內穩定的 participant 身分

客戶端沒有持久的 session，localStorage 被清掉後只能靠名字重新連線，
所以名字（trim + 不分大小寫）就是身分的依據。
"""
from dataclasses import dataclass
import logging

from models import Participant, Room
from services.naming_service import generate_uuid

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    participant: Participant
    is_reconnect: bool


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def _grant_admin(room: Room, participant: Participant) -> None:
    # 同一時間只有一位 admin
    for other in room.participants:
        if other is not participant:
            other.is_admin = False
    participant.is_admin = True
    room.admin_id = participant.id


def resolve_join(room: Room, candidate_id: str, name: str) -> JoinResult:
    """
    決定加入者是新的 participant 還是重新連線

    規則：
    1. 名字比對用 trim + casefold；顯示時保留 trim 後的原始大小寫
    2. 已有同名 participant -> 重新連線：沿用既有 id（忽略 candidate_id），
       更新顯示名稱；名字等於 admin_name 時重新取得 admin 並更新 room.admin_id
    3. 否則建立新的 participant（id = candidate_id，若已被他人使用則另發新 id）並加入列表

    參數：
        room: 已載入的 Room（會被原地修改）
        candidate_id: 客戶端目前持有的 id
        name: 顯示名稱（空白名稱由 API 層擋掉）

    返回：
        JoinResult(participant, is_reconnect)
    """
    display_name = name.strip()
    normalized = normalize_name(name)
    is_admin_name = normalized == normalize_name(room.admin_name)

    existing = next(
        (p for p in room.participants if normalize_name(p.name) == normalized),
        None
    )

    if existing:
        existing.name = display_name
        if is_admin_name:
            _grant_admin(room, existing)
        logger.info(
            f"Participant {existing.id} ({display_name}) reconnected to room {room.code}"
            f"{' as admin' if existing.is_admin else ''}"
        )
        return JoinResult(participant=existing, is_reconnect=True)

    participant_id = candidate_id
    if any(p.id == candidate_id for p in room.participants):
        # id 已被另一個名字使用，發一個新的 id 維持 participant id 唯一
        participant_id = generate_uuid()
        logger.warning(
            f"Candidate id {candidate_id} already taken in room {room.code}, issued {participant_id}"
        )

    participant = Participant(id=participant_id, name=display_name, is_admin=False)
    room.participants.append(participant)
    if is_admin_name:
        _grant_admin(room, participant)

    logger.info(
        f"Participant {participant.id} ({display_name}) joined room {room.code}"
        f"{' as admin' if participant.is_admin else ''}"
    )
    return JoinResult(participant=participant, is_reconnect=False)
