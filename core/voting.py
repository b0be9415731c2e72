"""
Voting Engine：目前這張票（current_ticket_index）的投票回合

票值是否屬於 {2, 4, 8, 16} 由 API 層檢查，這裡接受任何數值。
"""
import logging

from models import Room, RoomStatus, Ticket, Vote
from core.exceptions import PreconditionFailed

logger = logging.getLogger(__name__)

POINT_SCALE = (2, 4, 8, 16)


def _require_current_ticket(room: Room) -> Ticket:
    ticket = room.current_ticket
    if ticket is None:
        raise PreconditionFailed(f"Room {room.code} has no tickets")
    return ticket


def vote(room: Room, voter_id: str, voter_name: str, value: float) -> Room:
    """
    投票（同一位 voter 重投會覆蓋舊值，只保留最後一次）

    異常：
        PreconditionFailed: 沒有 tickets、房間不是 ACTIVE、或這張票已經 reveal
    """
    ticket = _require_current_ticket(room)
    if room.status != RoomStatus.ACTIVE:
        raise PreconditionFailed(
            f"Cannot vote while room {room.code} is {room.status.value}"
        )
    if ticket.is_revealed:
        raise PreconditionFailed(f"Ticket {ticket.key} is already revealed")

    ticket.votes = [v for v in ticket.votes if v.voter_id != voter_id]
    ticket.votes.append(Vote(voter_id=voter_id, voter_name=voter_name, value=value))
    return room


def reveal(room: Room) -> Room:
    """
    公開目前這張票的所有投票（0 票也可以 reveal）

    異常：
        PreconditionFailed: 沒有 tickets
    """
    ticket = _require_current_ticket(room)
    ticket.is_revealed = True
    logger.info(f"Revealed {len(ticket.votes)} votes on {ticket.key} in room {room.code}")
    return room


def reset_votes(room: Room) -> Room:
    """
    重新開始目前這張票的投票回合（清空投票、取消 reveal、清掉 agreed points）

    異常：
        PreconditionFailed: 沒有 tickets
    """
    ticket = _require_current_ticket(room)
    ticket.votes = []
    ticket.is_revealed = False
    ticket.agreed_points = None
    logger.info(f"Reset votes on {ticket.key} in room {room.code}")
    return room


def set_agreed_points(room: Room, points: float) -> Room:
    """
    設定 admin 確認的最終點數（不限於投票的點數表）

    異常：
        PreconditionFailed: 沒有 tickets，或這張票還沒 reveal
    """
    ticket = _require_current_ticket(room)
    if not ticket.is_revealed:
        raise PreconditionFailed(
            f"Ticket {ticket.key} must be revealed before setting agreed points"
        )
    ticket.agreed_points = points
    logger.info(f"Agreed {points} points on {ticket.key} in room {room.code}")
    return room
