import logging
from datetime import datetime
from typing import Callable, Hashable, Iterable, List, Optional, Tuple

from financeflow.domain import ExpenseRecord, WEEK_RELATIVE
from financeflow.periods import bucket_label

logger = logging.getLogger(__name__)


class OrderedTotals:
    """Running sums keyed in first-seen order.

    Keeps the key sequence separately from the accumulator map so the output
    order never depends on how a mapping happens to iterate.
    """

    def __init__(self):
        self._keys: List[Hashable] = []
        self._totals: dict = {}

    def add(self, key: Hashable, amount: float) -> None:
        if key not in self._totals:
            self._keys.append(key)
            self._totals[key] = 0
        self._totals[key] += amount

    def items(self) -> List[Tuple[Hashable, float]]:
        return [(k, self._totals[k]) for k in self._keys]


def group_totals(
    records: Iterable[ExpenseRecord], key: Callable[[ExpenseRecord], Hashable]
) -> List[Tuple[Hashable, float]]:
    acc = OrderedTotals()
    for r in records:
        acc.add(key(r), r.amount)
    return acc.items()


def total_spending(records: Iterable[ExpenseRecord]) -> float:
    return sum(r.amount for r in records)


def aggregate_by_category(records: Iterable[ExpenseRecord]) -> List[Tuple[str, float]]:
    return group_totals(records, lambda r: r.category)


def category_shares(totals: Iterable[Tuple[str, float]]) -> List[Tuple[str, float, float]]:
    """Attach each category's fraction of the grand total.

    Fractions are 0 when the grand total is 0.
    """
    totals = list(totals)
    grand = sum(t for _, t in totals)
    if grand == 0:
        return [(name, t, 0.0) for name, t in totals]
    return [(name, t, t / grand) for name, t in totals]


def aggregate_by_period(
    records: Iterable[ExpenseRecord], granularity: str, now: Optional[datetime] = None
) -> List[Tuple[str, float]]:
    """Sum amounts per time bucket.

    Buckets come out in first-appearance order over ``records``, not in
    chronological order. Monthly labels carry no year, so the same month of
    different years shares a bucket. ``now`` is required for week_relative.
    """
    series = group_totals(records, lambda r: bucket_label(r.occurred_at, granularity, now))
    logger.debug("aggregate_by_period(%s) produced %d buckets", granularity, len(series))
    return series


def weekly_totals(records: Iterable[ExpenseRecord], now: datetime) -> List[float]:
    return [total for _, total in aggregate_by_period(records, WEEK_RELATIVE, now)]
