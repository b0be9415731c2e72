"""
CSV 服務：tracker 匯出檔 -> tickets、報告 -> CSV

只處理格式轉換。Room Manager 收到的是已解析的 tickets，
Report Archive 也只產生報告資料，兩者都不碰 CSV。
"""
import csv
import io
from typing import Dict, List, Optional

from core.exceptions import ValidationRejected
from models import SavedReport, TicketInput
from services.naming_service import generate_uuid

REPORT_CSV_HEADER = [
    "Issue key",
    "Summary",
    "Parent key",
    "Parent summary",
    "Assignee",
    "Agreed points",
    "Average vote",
    "Votes",
]


def _find_column(header: List[str], *, exact=(), contains=()) -> Optional[int]:
    lowered = [h.strip().lower() for h in header]
    for name in exact:
        if name in lowered:
            return lowered.index(name)
    for name in contains:
        for i, h in enumerate(lowered):
            if name in h:
                return i
    return None


def _field(row: List[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(row):
        return None
    value = row[index].strip()
    return value or None


def parse_tickets_csv(content: str) -> List[TicketInput]:
    """
    解析 tracker（Jira）匯出的 CSV

    必要欄位：
    - "Issue key"（欄名包含即可，不分大小寫）
    - "Summary"（欄名完全相同，不分大小寫）

    選用欄位：Issue id、Assignee、Description、Parent key / Parent、Parent summary

    缺少 key 或 summary 的列會被略過；沒有 Issue id 時自動產生 ID

    異常：
        ValidationRejected: 缺少必要欄位
    """
    reader = csv.reader(io.StringIO(content.lstrip("\ufeff")))
    header = next(reader, None)
    if not header:
        raise ValidationRejected("CSV must have a header row")

    key_index = _find_column(header, contains=("issue key",))
    summary_index = _find_column(header, exact=("summary",))
    if key_index is None or summary_index is None:
        raise ValidationRejected('CSV must contain "Issue key" and "Summary" columns')

    columns: Dict[str, Optional[int]] = {
        "id": _find_column(header, contains=("issue id",)),
        "assignee": _find_column(header, exact=("assignee",)),
        "description": _find_column(header, exact=("description",)),
        "parent_key": _find_column(header, exact=("parent key", "parent")),
        "parent_summary": _find_column(header, exact=("parent summary",)),
    }

    tickets: List[TicketInput] = []
    for row in reader:
        key = _field(row, key_index)
        summary = _field(row, summary_index)
        if not key or not summary:
            continue
        tickets.append(TicketInput(
            id=_field(row, columns["id"]) or generate_uuid(),
            key=key,
            summary=summary,
            assignee=_field(row, columns["assignee"]),
            description=_field(row, columns["description"]),
            parent_key=_field(row, columns["parent_key"]),
            parent_summary=_field(row, columns["parent_summary"]),
        ))
    return tickets


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def report_to_csv(report: SavedReport) -> str:
    """
    把報告轉成 CSV（每張票一列）

    返回：
        CSV 字串，票值為整數時不帶小數點，投票欄格式為 "名字: 票值; ..."
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(REPORT_CSV_HEADER)
    for ticket in report.tickets:
        writer.writerow([
            ticket.key,
            ticket.summary,
            ticket.parent_key or "",
            ticket.parent_summary or "",
            ticket.assignee or "",
            _format_number(ticket.agreed_points),
            _format_number(ticket.average_vote),
            "; ".join(f"{v.voter_name}: {_format_number(v.value)}" for v in ticket.votes),
        ])
    return buffer.getvalue()
