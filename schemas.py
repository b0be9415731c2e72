"""
API request / response schemas

請求格式的驗證（空名稱、非法票值、負的 agreed points）都在這裡完成，
核心邏輯不再重複檢查。
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from models import Participant, Room, TicketInput
from core.voting import POINT_SCALE


def _non_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class CreateRoomRequest(BaseModel):
    admin_name: str

    @field_validator("admin_name")
    @classmethod
    def strip_admin_name(cls, value: str) -> str:
        return _non_blank(value)


class CreateRoomResponse(BaseModel):
    room: Room
    admin_id: str


class JoinRoomRequest(BaseModel):
    # 沒有 id 的客戶端由 API 層生成
    id: Optional[str] = None
    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _non_blank(value)


class JoinRoomResponse(BaseModel):
    room: Room
    participant: Participant
    is_reconnect: bool


class UploadTicketsRequest(BaseModel):
    tickets: List[TicketInput] = Field(min_length=1)


class UploadCsvRequest(BaseModel):
    content: str


class ReorderTicketsRequest(BaseModel):
    ticket_ids: List[str]


class VoteRequest(BaseModel):
    voter_id: str
    voter_name: str
    value: float

    @field_validator("voter_id", "voter_name")
    @classmethod
    def strip_voter(cls, value: str) -> str:
        return _non_blank(value)

    @field_validator("value")
    @classmethod
    def value_on_scale(cls, value: float) -> float:
        if value not in POINT_SCALE:
            raise ValueError(f"Vote value must be one of {', '.join(map(str, POINT_SCALE))}")
        return value


class AgreedPointsRequest(BaseModel):
    points: float = Field(ge=0)


class SaveReportRequest(BaseModel):
    room_code: str
    name: str
    admin_name: Optional[str] = None

    @field_validator("room_code", "name")
    @classmethod
    def strip_required(cls, value: str) -> str:
        return _non_blank(value)


class DeleteResponse(BaseModel):
    deleted: bool
