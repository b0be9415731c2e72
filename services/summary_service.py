"""
Session Summary 服務：房間估點結果的總覽

職責：
1. 每張票的投票明細、平均票值與 agreed points
2. 整個 session 的總點數與平均

報告存檔也是用同一份 summary 建立，所以報告內容和存檔當下看到的 summary 一致。
"""
from typing import List

from models import Room, SessionSummary, Ticket, TicketSummary, VoteDetail
from services.grouping_service import order_by_parent
from services.stats_service import average, round_one_decimal


def summarize_ticket(ticket: Ticket) -> TicketSummary:
    return TicketSummary(
        id=ticket.id,
        key=ticket.key,
        summary=ticket.summary,
        assignee=ticket.assignee,
        parent_key=ticket.parent_key,
        parent_summary=ticket.parent_summary,
        votes=[VoteDetail(voter_name=v.voter_name, value=v.value) for v in ticket.votes],
        average_vote=average(v.value for v in ticket.votes),
        agreed_points=ticket.agreed_points,
    )


def build_session_summary(room: Room) -> SessionSummary:
    """
    建立房間的 session summary

    計算規則：
    - total_points: 所有已設定 agreed_points 的票加總
    - estimated_tickets: 已設定 agreed_points 的票數
    - average_points: total_points / estimated_tickets，四捨五入到小數一位；沒有估點的票時為 0

    參數：
        room: 已載入的 Room

    返回：
        SessionSummary（tickets 依 parent 分組排序）
    """
    tickets: List[TicketSummary] = [
        summarize_ticket(t) for t in order_by_parent(room.tickets)
    ]
    agreed = [t.agreed_points for t in tickets if t.agreed_points is not None]
    total_points = sum(agreed)

    return SessionSummary(
        room_code=room.code,
        total_tickets=len(tickets),
        estimated_tickets=len(agreed),
        total_points=total_points,
        average_points=round_one_decimal(total_points / len(agreed)) if agreed else 0,
        tickets=tickets,
        participants=[p.name for p in room.participants],
    )
