"""
核心異常 -> HTTPException 的對照
"""
import logging

from fastapi import HTTPException

from core.exceptions import (
    PreconditionFailed,
    ReportNotFound,
    RoomNotFound,
    StoreUnavailable,
    ValidationRejected,
)

logger = logging.getLogger(__name__)


def to_http_exception(e: Exception, action: str) -> HTTPException:
    """
    把核心拋出的異常轉成對應的 HTTP status

    - RoomNotFound / ReportNotFound -> 404
    - ValidationRejected -> 400
    - PreconditionFailed -> 409
    - StoreUnavailable -> 503
    - 其他 -> 500（記錄完整 traceback）
    """
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, RoomNotFound):
        return HTTPException(status_code=404, detail="Room not found")
    if isinstance(e, ReportNotFound):
        return HTTPException(status_code=404, detail="Report not found")
    if isinstance(e, ValidationRejected):
        logger.warning(f"Rejected {action}: {e}")
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PreconditionFailed):
        logger.warning(f"Cannot {action}: {e}")
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, StoreUnavailable):
        return HTTPException(status_code=503, detail="Store unavailable")

    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail="Internal error")
