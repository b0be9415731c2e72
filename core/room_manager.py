"""
Room Manager：管理 Room 的完整生命週期

職責：
1. 建立 Room（含 admin participant）
2. 載入 / 儲存 Room（整個 Room 一次讀、一次寫）
3. 把每個指令導向 state machine / voting engine / identity resolver

每個操作的流程都是：load -> 在記憶體中修改 -> 整個 Room 寫回 store
- 修改過程中任何異常都會讓這份記憶體中的 Room 直接丟掉，不會寫回
- 寫回時刷新 TTL（預設 7 天沒有活動就過期）

已知限制（last-write-wins）：
    store 沒有 compare-and-swap，也沒有 per-room lock。
    兩個請求同時修改同一個房間時，後寫回的會覆蓋先寫回的修改。
    投票是人的速度，客戶端靠輪詢收斂，所以接受這個行為，不另外加鎖。
"""
from typing import Callable, List, Optional, Tuple
import logging

from models import Participant, Room, RoomStatus, SessionSummary, TicketInput
from core import state_machine, voting
from core.exceptions import RoomNotFound
from core.identity import JoinResult, resolve_join
from core.store import KeyValueStore
from database import SEVEN_DAYS
from services.naming_service import generate_room_code, normalize_room_code
from services.stats_service import VoteStats, compute_vote_stats
from services.summary_service import build_session_summary

logger = logging.getLogger(__name__)


def room_key(code: str) -> str:
    return f"room:{normalize_room_code(code)}"


class RoomManager:
    """Room 生命週期管理器"""

    def __init__(self, store: KeyValueStore, room_ttl_seconds: int = SEVEN_DAYS):
        self.store = store
        self.room_ttl_seconds = room_ttl_seconds

    # ============ Load / Save ============

    def get_room(self, code: str) -> Room:
        """
        透過房間代碼取得 Room（不分大小寫）

        異常：
            RoomNotFound: Room 不存在或已過期
            StoreUnavailable: store 無法使用
        """
        data = self.store.get(room_key(code))
        if data is None:
            raise RoomNotFound(normalize_room_code(code))
        return Room.model_validate(data)

    def save_room(self, room: Room) -> Room:
        self.store.set(room_key(room.code), room.model_dump(mode="json"), self.room_ttl_seconds)
        return room

    def _apply(self, code: str, operation: Callable[..., Room], *args) -> Room:
        """
        load -> operation(room, *args) -> save

        operation 拋出異常時不會寫回，store 內的 Room 保持不變
        """
        room = self.get_room(code)
        room = operation(room, *args)
        return self.save_room(room)

    # ============ 建立 / 加入 ============

    def create_room(self, admin_id: str, admin_name: str) -> Room:
        """
        建立新房間（含 admin participant）

        流程：
        1. 生成唯一的房間代碼（碰撞就重新生成）
        2. 建立 Room，admin 是唯一的 participant
        3. 寫入 store

        參數：
            admin_id: admin 的 participant id（由 API 層生成）
            admin_name: admin 的顯示名稱（已 trim）

        返回：
            新的 Room（status=ACTIVE、沒有 tickets、planning 尚未開始）
        """
        code = generate_room_code()
        while self.store.get(room_key(code)) is not None:
            logger.warning(f"Room code collision detected, regenerating: {code}")
            code = generate_room_code()

        room = Room(
            code=code,
            admin_id=admin_id,
            admin_name=admin_name,
            participants=[Participant(id=admin_id, name=admin_name, is_admin=True)],
            status=RoomStatus.ACTIVE,
        )
        self.save_room(room)

        logger.info(f"Created room {code} for admin {admin_name} ({admin_id})")
        return room

    def join_room(self, code: str, candidate_id: str, name: str) -> Tuple[Room, JoinResult]:
        """
        加入房間或重新連線（以名字比對身分）

        返回：
            (更新後的 Room, JoinResult)

        異常：
            RoomNotFound: Room 不存在
        """
        room = self.get_room(code)
        result = resolve_join(room, candidate_id, name)
        self.save_room(room)
        return room, result

    # ============ Tickets ============

    def upload_tickets(self, code: str, tickets: List[TicketInput]) -> Room:
        return self._apply(code, state_machine.upload_tickets, tickets)

    def reorder_tickets(self, code: str, ordered_ids: List[str]) -> Room:
        return self._apply(code, state_machine.reorder_tickets, ordered_ids)

    def start_planning(self, code: str) -> Room:
        return self._apply(code, state_machine.start_planning)

    def next_ticket(self, code: str) -> Room:
        return self._apply(code, state_machine.next_ticket)

    def prev_ticket(self, code: str) -> Room:
        return self._apply(code, state_machine.prev_ticket)

    # ============ 生命週期 ============

    def pause(self, code: str) -> Room:
        return self._apply(code, state_machine.pause)

    def resume(self, code: str) -> Room:
        return self._apply(code, state_machine.resume)

    def end(self, code: str) -> Room:
        room = self._apply(code, state_machine.end)
        logger.info(f"Session ended for room {room.code}")
        return room

    # ============ 投票 ============

    def vote(self, code: str, voter_id: str, voter_name: str, value: float) -> Room:
        return self._apply(code, voting.vote, voter_id, voter_name, value)

    def reveal(self, code: str) -> Room:
        return self._apply(code, voting.reveal)

    def reset_votes(self, code: str) -> Room:
        return self._apply(code, voting.reset_votes)

    def set_agreed_points(self, code: str, points: float) -> Room:
        return self._apply(code, voting.set_agreed_points, points)

    # ============ 查詢 ============

    def get_current_stats(self, code: str) -> Optional[VoteStats]:
        """
        目前這張票的統計（還沒 reveal 時返回 None，避免提前洩漏票值）
        """
        room = self.get_room(code)
        ticket = room.current_ticket
        if ticket is None or not ticket.is_revealed:
            return None
        return compute_vote_stats(ticket.votes)

    def get_summary(self, code: str) -> SessionSummary:
        return build_session_summary(self.get_room(code))
