"""
Report API Endpoints

職責：
1. 把房間存成報告
2. 列出 / 查詢 / 刪除報告
3. 匯出報告 CSV
"""
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import Response
import logging

from models import ReportListItem, SavedReport
from schemas import DeleteResponse, SaveReportRequest
from core.report_archive import ReportArchive
from api.dependencies import get_report_archive
from api.errors import to_http_exception
from services.csv_service import report_to_csv

router = APIRouter(prefix="/api/reports", tags=["reports"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[ReportListItem])
def list_reports(archive: ReportArchive = Depends(get_report_archive)):
    """所有報告摘要（newest-first）"""
    try:
        return archive.list_reports()
    except Exception as e:
        raise to_http_exception(e, "list reports")


@router.post("", response_model=SavedReport)
def save_report(data: SaveReportRequest, archive: ReportArchive = Depends(get_report_archive)):
    """
    儲存報告

    前置條件：
    - 房間存在且有 tickets
    """
    try:
        return archive.save_report(data.room_code, data.name, data.admin_name or "Admin")
    except Exception as e:
        raise to_http_exception(e, "save report")


@router.get("/{report_id}", response_model=SavedReport)
def get_report(report_id: str, archive: ReportArchive = Depends(get_report_archive)):
    try:
        return archive.get_report(report_id)
    except Exception as e:
        raise to_http_exception(e, "get report")


@router.delete("/{report_id}", response_model=DeleteResponse)
def delete_report(report_id: str, archive: ReportArchive = Depends(get_report_archive)):
    """刪除報告（不存在也回傳成功）"""
    try:
        archive.delete_report(report_id)
        return DeleteResponse(deleted=True)
    except Exception as e:
        raise to_http_exception(e, "delete report")


@router.get("/{report_id}/csv")
def export_report_csv(report_id: str, archive: ReportArchive = Depends(get_report_archive)):
    try:
        report = archive.get_report(report_id)
    except Exception as e:
        raise to_http_exception(e, "export report")

    filename = f"{report.id}.csv"
    return Response(
        content=report_to_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
