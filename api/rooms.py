"""
Room API Endpoints

職責：
1. 建立 / 查詢房間
2. Ticket 上傳、排序、開始 planning、前後切換
3. Session 生命週期（pause / resume / end）
4. Session summary

所有 endpoint 都是薄薄一層：驗證請求 -> 呼叫 RoomManager -> 回傳整個 Room
"""
from fastapi import APIRouter, Depends
import logging

from models import Room, SessionSummary
from schemas import (
    CreateRoomRequest,
    CreateRoomResponse,
    ReorderTicketsRequest,
    UploadCsvRequest,
    UploadTicketsRequest,
)
from core.room_manager import RoomManager
from api.dependencies import get_room_manager
from api.errors import to_http_exception
from services.csv_service import parse_tickets_csv
from services.naming_service import generate_uuid

router = APIRouter(prefix="/api/rooms", tags=["rooms"])
logger = logging.getLogger(__name__)


@router.post("", response_model=CreateRoomResponse)
def create_room(data: CreateRoomRequest, manager: RoomManager = Depends(get_room_manager)):
    """
    建立房間（admin endpoint）

    流程：
    1. 生成 admin 的 participant id
    2. 建立 Room（admin 是第一位 participant）

    返回：
        - room: 新的 Room
        - admin_id: 客戶端要保存的 admin id
    """
    try:
        admin_id = generate_uuid()
        room = manager.create_room(admin_id, data.admin_name)
        return CreateRoomResponse(room=room, admin_id=admin_id)
    except Exception as e:
        raise to_http_exception(e, "create room")


@router.get("/{code}", response_model=Room)
def get_room(code: str, manager: RoomManager = Depends(get_room_manager)):
    """取得房間狀態（客戶端輪詢用）"""
    try:
        return manager.get_room(code)
    except Exception as e:
        raise to_http_exception(e, "get room")


@router.post("/{code}/tickets", response_model=Room)
def upload_tickets(
    code: str,
    data: UploadTicketsRequest,
    manager: RoomManager = Depends(get_room_manager)
):
    """
    上傳 tickets（整批取代，清掉所有投票）

    前置條件：
    - tickets 不可為空（schema 驗證）
    """
    try:
        return manager.upload_tickets(code, data.tickets)
    except Exception as e:
        raise to_http_exception(e, "upload tickets")


@router.post("/{code}/tickets/csv", response_model=Room)
def upload_tickets_csv(
    code: str,
    data: UploadCsvRequest,
    manager: RoomManager = Depends(get_room_manager)
):
    """
    上傳 tracker 匯出的 CSV

    流程：
    1. 解析 CSV（需要 "Issue key" 與 "Summary" 欄位）
    2. 與 /tickets 相同的上傳流程
    """
    try:
        tickets = parse_tickets_csv(data.content)
        logger.info(f"Parsed {len(tickets)} tickets from CSV for room {code}")
        return manager.upload_tickets(code, tickets)
    except Exception as e:
        raise to_http_exception(e, "upload tickets")


@router.post("/{code}/reorder", response_model=Room)
def reorder_tickets(
    code: str,
    data: ReorderTicketsRequest,
    manager: RoomManager = Depends(get_room_manager)
):
    """
    重新排列 tickets（只能在開始 planning 前）

    前置條件：
    - ticket_ids 必須與房間現有的 ticket id 一對一對應
    """
    try:
        return manager.reorder_tickets(code, data.ticket_ids)
    except Exception as e:
        raise to_http_exception(e, "reorder tickets")


@router.post("/{code}/start", response_model=Room)
def start_planning(code: str, manager: RoomManager = Depends(get_room_manager)):
    try:
        return manager.start_planning(code)
    except Exception as e:
        raise to_http_exception(e, "start planning")


@router.post("/{code}/next", response_model=Room)
def next_ticket(code: str, manager: RoomManager = Depends(get_room_manager)):
    try:
        return manager.next_ticket(code)
    except Exception as e:
        raise to_http_exception(e, "move to next ticket")


@router.post("/{code}/prev", response_model=Room)
def prev_ticket(code: str, manager: RoomManager = Depends(get_room_manager)):
    try:
        return manager.prev_ticket(code)
    except Exception as e:
        raise to_http_exception(e, "move to previous ticket")


@router.post("/{code}/pause", response_model=Room)
def pause_session(code: str, manager: RoomManager = Depends(get_room_manager)):
    try:
        return manager.pause(code)
    except Exception as e:
        raise to_http_exception(e, "pause session")


@router.post("/{code}/resume", response_model=Room)
def resume_session(code: str, manager: RoomManager = Depends(get_room_manager)):
    try:
        return manager.resume(code)
    except Exception as e:
        raise to_http_exception(e, "resume session")


@router.post("/{code}/end", response_model=Room)
def end_session(code: str, manager: RoomManager = Depends(get_room_manager)):
    try:
        return manager.end(code)
    except Exception as e:
        raise to_http_exception(e, "end session")


@router.get("/{code}/summary", response_model=SessionSummary)
def get_summary(code: str, manager: RoomManager = Depends(get_room_manager)):
    """
    Session summary

    返回：
        - 每張票的投票、平均與 agreed points（依 parent 分組排序）
        - total / estimated tickets、total / average points
        - participants 名單
    """
    try:
        return manager.get_summary(code)
    except Exception as e:
        raise to_http_exception(e, "get summary")
