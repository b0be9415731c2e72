"""
投票統計服務

純計算邏輯，不依賴 Room
"""
import math
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from models import Vote


class VoteStats(BaseModel):
    average: float = 0.0
    most_common: Optional[float] = None
    # key 依第一次出現的順序排列
    distribution: Dict[float, int] = Field(default_factory=dict)
    vote_count: int = 0


def round_one_decimal(value: float) -> float:
    """四捨五入到小數第一位（.x5 一律進位，不使用 banker's rounding）"""
    return math.floor(value * 10 + 0.5) / 10


def average(values: Iterable[float]) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return round_one_decimal(sum(values) / len(values))


def compute_vote_stats(votes: List[Vote]) -> VoteStats:
    """
    計算一張票的投票統計

    規則：
    - average：所有票值的平均，四捨五入到小數第一位；沒有票時為 0
    - distribution：每個票值出現的次數
    - most_common：出現次數最多的票值；平手時取「最先出現」的那個值
      （依投票順序，而不是數值大小）。沒有票時為 None

    範例：
        votes = [4, 8]  -> average 6.0, distribution {4: 1, 8: 1}, most_common 4
        votes = [8, 4, 4, 8] -> most_common 8（8 比 4 先出現）
    """
    if not votes:
        return VoteStats()

    distribution: Dict[float, int] = {}
    for vote in votes:
        distribution[vote.value] = distribution.get(vote.value, 0) + 1

    most_common = None
    max_count = 0
    for value, count in distribution.items():
        # 嚴格大於：平手時保留先出現的值
        if count > max_count:
            max_count = count
            most_common = value

    return VoteStats(
        average=average(v.value for v in votes),
        most_common=most_common,
        distribution=distribution,
        vote_count=len(votes),
    )
