"""
Report Archive：把房間當下的狀態存成不可變的報告

- 報告是 Room 的快照（不是參照），房間之後的修改或過期都不影響報告
- 報告本體存在 report:<id>，另外維護一個 newest-first 的 id 列表（reports:index）
"""
from typing import List
import logging

from models import ReportListItem, SavedReport, utcnow
from core.exceptions import PreconditionFailed, ReportNotFound
from core.room_manager import RoomManager
from core.store import KeyValueStore
from database import ONE_YEAR
from services.naming_service import generate_report_id
from services.summary_service import build_session_summary

logger = logging.getLogger(__name__)

REPORT_INDEX_KEY = "reports:index"


def report_key(report_id: str) -> str:
    return f"report:{report_id}"


class ReportArchive:
    """報告的建立、查詢與刪除"""

    def __init__(self, store: KeyValueStore, room_manager: RoomManager,
                 report_ttl_seconds: int = ONE_YEAR):
        self.store = store
        self.room_manager = room_manager
        self.report_ttl_seconds = report_ttl_seconds

    def _load_index(self) -> List[str]:
        return list(self.store.get(REPORT_INDEX_KEY) or [])

    def _save_index(self, ids: List[str]) -> None:
        self.store.set(REPORT_INDEX_KEY, ids, self.report_ttl_seconds)

    def save_report(self, room_code: str, name: str, saved_by: str) -> SavedReport:
        """
        把房間存成報告

        流程：
        1. 載入 Room，確認有 tickets
        2. 以 session summary 建立快照（每張票的投票、平均、agreed points 與總計）
        3. 寫入報告本體，再把 id 加到 index 最前面

        參數：
            room_code: 房間代碼
            name: 報告名稱
            saved_by: 存檔者名稱

        返回：
            SavedReport

        異常：
            RoomNotFound: Room 不存在
            PreconditionFailed: Room 沒有 tickets
        """
        room = self.room_manager.get_room(room_code)
        if not room.tickets:
            raise PreconditionFailed(f"Room {room.code} has no tickets to report")

        summary = build_session_summary(room)
        report = SavedReport(
            id=generate_report_id(),
            name=name,
            created_at=utcnow(),
            created_by=saved_by,
            **summary.model_dump(),
        )

        self.store.set(report_key(report.id), report.model_dump(mode="json"), self.report_ttl_seconds)
        self._save_index([report.id] + self._load_index())

        logger.info(
            f"Saved report {report.id} ({name}) from room {room.code}: "
            f"{report.estimated_tickets}/{report.total_tickets} estimated, {report.total_points} points"
        )
        return report

    def get_report(self, report_id: str) -> SavedReport:
        """
        異常：
            ReportNotFound: 報告不存在
        """
        data = self.store.get(report_key(report_id))
        if data is None:
            raise ReportNotFound(report_id)
        return SavedReport.model_validate(data)

    def list_reports(self) -> List[ReportListItem]:
        """
        所有報告的摘要（不含每張票的細節），newest-first

        index 裡找不到本體的 id（報告已過期）會順便從 index 移除
        """
        index = self._load_index()
        items: List[ReportListItem] = []
        live_ids: List[str] = []
        for report_id in index:
            data = self.store.get(report_key(report_id))
            if data is None:
                continue
            live_ids.append(report_id)
            items.append(SavedReport.model_validate(data).to_list_item())

        if len(live_ids) != len(index):
            logger.info(f"Pruned {len(index) - len(live_ids)} expired ids from report index")
            self._save_index(live_ids)
        return items

    def delete_report(self, report_id: str) -> None:
        """刪除報告本體與 index 中的項目（不存在也不算錯誤）"""
        self.store.delete(report_key(report_id))
        index = self._load_index()
        if report_id in index:
            self._save_index([i for i in index if i != report_id])
        logger.info(f"Deleted report {report_id}")
