"""
Room State Machine：集中管理房間的生命週期與 ticket 進度

狀態轉換：
    ACTIVE -> PAUSED -> ACTIVE (resume)
    ACTIVE -> COMPLETED
    PAUSED -> COMPLETED

所有函式都作用在已載入的 Room 上（原地修改並返回同一個 Room）。
每個操作先完整檢查前置條件再修改，檢查失敗時拋出異常、Room 保持不變。
"""
from typing import Dict, List, Set
import logging

from models import Room, RoomStatus, Ticket, TicketInput, utcnow
from core.exceptions import InvalidStateTransition, PreconditionFailed, ValidationRejected
from services.grouping_service import order_by_parent

logger = logging.getLogger(__name__)


class RoomStateMachine:
    """房間狀態轉換表"""

    TRANSITIONS: Dict[RoomStatus, Set[RoomStatus]] = {
        RoomStatus.ACTIVE: {RoomStatus.PAUSED, RoomStatus.COMPLETED},
        RoomStatus.PAUSED: {RoomStatus.ACTIVE, RoomStatus.PAUSED, RoomStatus.COMPLETED},
        RoomStatus.COMPLETED: {RoomStatus.COMPLETED},
    }

    @classmethod
    def can_transition(cls, current: RoomStatus, target: RoomStatus) -> bool:
        return target in cls.TRANSITIONS[current]

    @classmethod
    def transition(cls, room: Room, target: RoomStatus) -> Room:
        """
        轉換房間狀態

        異常：
            InvalidStateTransition: 轉換不在 TRANSITIONS 內
        """
        if not cls.can_transition(room.status, target):
            raise InvalidStateTransition(
                f"Cannot transition room {room.code} from {room.status.value} to {target.value}"
            )
        logger.info(f"Room {room.code}: {room.status.value} -> {target.value}")
        room.status = target
        room.paused_at = utcnow() if target == RoomStatus.PAUSED else None
        return room

    @staticmethod
    def reopen(room: Room) -> Room:
        """
        強制回到 ACTIVE（上傳新 tickets / 開始 planning 時使用）

        這兩個操作代表一個新的估點 session，所以不受 COMPLETED 終止狀態限制。
        """
        if room.status != RoomStatus.ACTIVE:
            logger.info(f"Room {room.code}: {room.status.value} -> active (reopened)")
        room.status = RoomStatus.ACTIVE
        room.paused_at = None
        return room


# ============ Ticket 操作 ============

def upload_tickets(room: Room, tickets: List[TicketInput]) -> Room:
    """
    整批取代房間的 tickets

    - 依 parent 分組後攤平，同一個 epic 的票排在一起
    - 所有投票、reveal、agreed points 都會清掉
    - current_ticket_index 歸零，狀態強制回到 ACTIVE

    異常：
        ValidationRejected: tickets 為空，或 ticket id 重複
    """
    if not tickets:
        raise ValidationRejected("At least one ticket is required")
    if len({t.id for t in tickets}) != len(tickets):
        raise ValidationRejected("Ticket ids must be unique")

    fresh = [
        Ticket(**t.model_dump(include=set(TicketInput.model_fields)))
        for t in tickets
    ]
    room.tickets = order_by_parent(fresh)
    room.current_ticket_index = 0
    RoomStateMachine.reopen(room)

    logger.info(f"Uploaded {len(room.tickets)} tickets to room {room.code}")
    return room


def reorder_tickets(room: Room, ordered_ids: List[str]) -> Room:
    """
    依 ordered_ids 重新排列 tickets（只能在開始 planning 之前）

    異常：
        PreconditionFailed: 已開始 planning，或房間沒有 tickets
        ValidationRejected: ordered_ids 與現有 ticket id 不是一對一對應
    """
    if room.planning_started:
        raise PreconditionFailed("Cannot reorder tickets after planning has started")
    if not room.tickets:
        raise PreconditionFailed("Room has no tickets to reorder")

    by_id = {t.id: t for t in room.tickets}
    if (
        len(ordered_ids) != len(room.tickets)
        or len(set(ordered_ids)) != len(ordered_ids)
        or set(ordered_ids) != set(by_id)
    ):
        raise ValidationRejected("Ticket ids do not match the room's tickets")

    room.tickets = [by_id[ticket_id] for ticket_id in ordered_ids]
    logger.info(f"Reordered {len(room.tickets)} tickets in room {room.code}")
    return room


def start_planning(room: Room) -> Room:
    """
    開始 planning：鎖定 ticket 順序，從第一張票開始

    異常：
        PreconditionFailed: 已經開始過，或房間沒有 tickets
    """
    if room.planning_started:
        raise PreconditionFailed(f"Planning already started in room {room.code}")
    if not room.tickets:
        raise PreconditionFailed("Cannot start planning without tickets")

    room.planning_started = True
    room.current_ticket_index = 0
    RoomStateMachine.reopen(room)

    logger.info(f"Planning started in room {room.code}")
    return room


def next_ticket(room: Room) -> Room:
    # 到底就停，不循環也不報錯
    if room.current_ticket_index < len(room.tickets) - 1:
        room.current_ticket_index += 1
    return room


def prev_ticket(room: Room) -> Room:
    if room.current_ticket_index > 0:
        room.current_ticket_index -= 1
    return room


# ============ 生命週期 ============

def pause(room: Room) -> Room:
    """
    暫停 session

    異常：
        InvalidStateTransition: 房間已經 COMPLETED
    """
    return RoomStateMachine.transition(room, RoomStatus.PAUSED)


def resume(room: Room) -> Room:
    """
    恢復 session

    異常：
        InvalidStateTransition: 房間不是 PAUSED
    """
    if room.status != RoomStatus.PAUSED:
        raise InvalidStateTransition(
            f"Cannot resume room {room.code} in status {room.status.value}"
        )
    return RoomStateMachine.transition(room, RoomStatus.ACTIVE)


def end(room: Room) -> Room:
    # 任何狀態都可以結束
    return RoomStateMachine.transition(room, RoomStatus.COMPLETED)
