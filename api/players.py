"""
Player API Endpoints

職責：
1. 玩家加入房間
2. 以名字重新連線（localStorage 遺失時恢復原本的身分與 admin 權限）
"""
from fastapi import APIRouter, Depends
import logging

from schemas import JoinRoomRequest, JoinRoomResponse
from core.room_manager import RoomManager
from api.dependencies import get_room_manager
from api.errors import to_http_exception
from services.naming_service import generate_uuid

router = APIRouter(prefix="/api/rooms", tags=["players"])
logger = logging.getLogger(__name__)


@router.post("/{code}/join", response_model=JoinRoomResponse)
def join_room(
    code: str,
    player_data: JoinRoomRequest,
    manager: RoomManager = Depends(get_room_manager)
):
    """
    加入房間（玩家 endpoint）

    前置條件：
    - 房間必須存在

    流程：
    1. 客戶端沒有 id 時生成一個
    2. 名字已存在 -> 重新連線（沿用原本的 id）
    3. 否則建立新的 participant
    4. 返回房間與 participant（客戶端以返回的 id 為準）
    """
    try:
        candidate_id = player_data.id or generate_uuid()
        room, result = manager.join_room(code, candidate_id, player_data.name)
        return JoinRoomResponse(
            room=room,
            participant=result.participant,
            is_reconnect=result.is_reconnect
        )
    except Exception as e:
        raise to_http_exception(e, "join room")
