"""
Ticket 分組服務

職責：
1. 依 parent（epic）把 tickets 分組，讓同一個 epic 的票連續估點
2. 把分組結果攤平成單一列表

上傳後存回 Room 的順序，以及 summary / 報告的順序，都是用這裡的排序。
"""
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass
class TicketGroup(Generic[T]):
    parent_key: Optional[str]
    parent_summary: Optional[str]
    tickets: List[T] = field(default_factory=list)

    @property
    def is_ungrouped(self) -> bool:
        return not self.parent_key


def _sort_key(group: TicketGroup):
    # 有 parent 的組先排，依 parent summary（沒有 summary 就用 parent key）；沒有 parent 的組永遠最後
    if group.is_ungrouped:
        return (1, "")
    return (0, group.parent_summary or group.parent_key)


def group_by_parent(tickets: Sequence[T]) -> List[TicketGroup[T]]:
    """
    依 parent_key 把 tickets 分組

    流程：
    1. 依出現順序建立每個 parent_key 的組，組名取該組第一個非空的 parent_summary
    2. 沒有 parent_key 的票放進同一個未分組的組
    3. 依 _sort_key 排序（排序穩定，相同 key 的組保持首次出現順序）

    參數：
        tickets: 任何有 parent_key / parent_summary 屬性的物件（上傳的票、房間內的票、報告列）

    返回：
        TicketGroup 列表，組內 tickets 保持輸入順序
    """
    groups: dict = {}
    for ticket in tickets:
        parent_key = getattr(ticket, "parent_key", None) or None
        group = groups.get(parent_key)
        if group is None:
            group = TicketGroup(parent_key=parent_key, parent_summary=None)
            groups[parent_key] = group
        if group.parent_summary is None and parent_key:
            group.parent_summary = getattr(ticket, "parent_summary", None) or None
        group.tickets.append(ticket)

    return sorted(groups.values(), key=_sort_key)


def flatten_groups(groups: Sequence[TicketGroup[T]]) -> List[T]:
    flattened: List[T] = []
    for group in groups:
        flattened.extend(group.tickets)
    return flattened


def order_by_parent(tickets: Sequence[T]) -> List[T]:
    return flatten_groups(group_by_parent(tickets))
