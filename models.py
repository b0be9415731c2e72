"""
資料模型

- Domain aggregates（Room / Ticket / Vote / Participant / SavedReport）用 Pydantic 表示，
  整個 Room 以 JSON 形式存進 key-value store
- StoreEntry 是 SqlKeyValueStore 使用的 SQLAlchemy table
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import Column, DateTime, Float, String, Text

from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoomStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


# ============ Room aggregate ============

class Vote(BaseModel):
    voter_id: str
    voter_name: str
    value: float


class Participant(BaseModel):
    id: str
    name: str
    is_admin: bool = False


class TicketInput(BaseModel):
    """上傳時由呼叫端提供的票（尚未有投票狀態）"""
    id: str
    key: str
    summary: str
    assignee: Optional[str] = None
    description: Optional[str] = None
    parent_key: Optional[str] = None
    parent_summary: Optional[str] = None


class Ticket(TicketInput):
    votes: List[Vote] = Field(default_factory=list)
    is_revealed: bool = False
    agreed_points: Optional[float] = None


class Room(BaseModel):
    code: str
    admin_id: str
    admin_name: str
    participants: List[Participant] = Field(default_factory=list)
    tickets: List[Ticket] = Field(default_factory=list)
    current_ticket_index: int = 0
    status: RoomStatus = RoomStatus.ACTIVE
    planning_started: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    paused_at: Optional[datetime] = None

    @property
    def current_ticket(self) -> Optional[Ticket]:
        if not self.tickets:
            return None
        return self.tickets[self.current_ticket_index]


# ============ Summary / Report ============

class VoteDetail(BaseModel):
    voter_name: str
    value: float


class TicketSummary(BaseModel):
    id: str
    key: str
    summary: str
    assignee: Optional[str] = None
    parent_key: Optional[str] = None
    parent_summary: Optional[str] = None
    votes: List[VoteDetail] = Field(default_factory=list)
    average_vote: Optional[float] = None
    agreed_points: Optional[float] = None


class SessionSummary(BaseModel):
    room_code: str
    total_tickets: int
    estimated_tickets: int
    total_points: float
    average_points: float
    tickets: List[TicketSummary] = Field(default_factory=list)
    participants: List[str] = Field(default_factory=list)


class ReportListItem(BaseModel):
    id: str
    name: str
    room_code: str
    created_at: datetime
    created_by: str
    total_tickets: int
    estimated_tickets: int
    total_points: float
    average_points: float


class SavedReport(ReportListItem):
    participants: List[str] = Field(default_factory=list)
    tickets: List[TicketSummary] = Field(default_factory=list)

    def to_list_item(self) -> ReportListItem:
        return ReportListItem(**self.model_dump(exclude={"participants", "tickets"}))


# ============ Persistence ============

class StoreEntry(Base):
    """Key-value store 的一筆資料（value 為 JSON 字串）"""
    __tablename__ = "kv_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    # Unix timestamp；None 表示不過期
    expires_at = Column(Float, nullable=True, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
