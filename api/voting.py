"""
Voting API Endpoints - 短輪詢版

重點：
1. 所有操作只作用在目前這張票（current_ticket_index）
2. 票值必須是 2 / 4 / 8 / 16（schema 驗證）
3. 前端靠 GET /api/rooms/{code} 輪詢取得最新狀態
"""
from typing import Optional

from fastapi import APIRouter, Depends
import logging

from models import Room
from schemas import AgreedPointsRequest, VoteRequest
from core.room_manager import RoomManager
from api.dependencies import get_room_manager
from api.errors import to_http_exception
from services.stats_service import VoteStats

router = APIRouter(prefix="/api/rooms", tags=["voting"])
logger = logging.getLogger(__name__)


@router.post("/{code}/vote", response_model=Room)
def submit_vote(
    code: str,
    vote_data: VoteRequest,
    manager: RoomManager = Depends(get_room_manager)
):
    """
    投票（重複投票會覆蓋自己之前的票）

    前置條件：
    - 房間有 tickets 且狀態為 ACTIVE
    - 目前這張票還沒 reveal
    """
    try:
        return manager.vote(code, vote_data.voter_id, vote_data.voter_name, vote_data.value)
    except Exception as e:
        raise to_http_exception(e, "submit vote")


@router.post("/{code}/reveal", response_model=Room)
def reveal_votes(code: str, manager: RoomManager = Depends(get_room_manager)):
    try:
        return manager.reveal(code)
    except Exception as e:
        raise to_http_exception(e, "reveal votes")


@router.post("/{code}/reset", response_model=Room)
def reset_votes(code: str, manager: RoomManager = Depends(get_room_manager)):
    """重新投票：清空投票、取消 reveal、清掉 agreed points"""
    try:
        return manager.reset_votes(code)
    except Exception as e:
        raise to_http_exception(e, "reset votes")


@router.post("/{code}/agree", response_model=Room)
def set_agreed_points(
    code: str,
    data: AgreedPointsRequest,
    manager: RoomManager = Depends(get_room_manager)
):
    """
    設定 agreed points（admin endpoint）

    前置條件：
    - 目前這張票已經 reveal
    - points >= 0（不限於投票的點數表）
    """
    try:
        return manager.set_agreed_points(code, data.points)
    except Exception as e:
        raise to_http_exception(e, "set agreed points")


@router.get("/{code}/stats", response_model=Optional[VoteStats])
def get_current_stats(code: str, manager: RoomManager = Depends(get_room_manager)):
    """
    目前這張票的投票統計

    返回：
        - average / most_common / distribution
        - 還沒 reveal 時返回 null
    """
    try:
        return manager.get_current_stats(code)
    except Exception as e:
        raise to_http_exception(e, "get vote stats")
