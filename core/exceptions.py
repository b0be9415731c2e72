"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理

對應的 HTTP status（由 API 層轉換）：
- RoomNotFound / ReportNotFound -> 404
- ValidationRejected -> 400
- PreconditionFailed（含 InvalidStateTransition）-> 409
- StoreUnavailable -> 503
"""


class PlanningPokerException(Exception):
    """所有 planning poker 異常的基類"""
    pass


# ============ Not found ============

class RoomNotFound(PlanningPokerException):
    """房間不存在（或已過期）"""
    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} not found")


class ReportNotFound(PlanningPokerException):
    """報告不存在"""
    def __init__(self, report_id):
        self.report_id = report_id
        super().__init__(f"Report {report_id} not found")


# ============ 前置條件 ============

class PreconditionFailed(PlanningPokerException):
    """操作不適用於目前狀態（例如：尚未 reveal 就設定 agreed points）"""
    pass


class InvalidStateTransition(PreconditionFailed):
    """非法的房間狀態轉換（例如：resume 一個非 paused 的房間）"""
    pass


# ============ 輸入驗證 ============

class ValidationRejected(PlanningPokerException):
    """輸入不合法（例如：reorder 的 id 集合不一致、上傳空的 ticket 列表）"""
    pass


# ============ Store ============

class StoreUnavailable(PlanningPokerException):
    """外部 key-value store 無法使用"""
    pass
