import logging
from datetime import date, datetime, time
from typing import Callable, Iterable, Iterator, Optional, Union

from financeflow.domain import DateRange, ExpenseRecord
from financeflow.periods import naive_local

logger = logging.getLogger(__name__)


def _lower_bound(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return naive_local(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    raise TypeError(f"Date range bound must be a date or datetime, got {type(value).__name__}")


def _upper_bound(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return naive_local(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max)
    raise TypeError(f"Date range bound must be a date or datetime, got {type(value).__name__}")


def by_category(category: str):
    def _filter(r: ExpenseRecord) -> bool:
        return r.category == category

    return _filter


def by_date_range(date_range: DateRange):
    start = _lower_bound(date_range.start) if date_range.start is not None else None
    end = _upper_bound(date_range.end) if date_range.end is not None else None

    def _filter(r: ExpenseRecord) -> bool:
        ts = naive_local(r.occurred_at)
        if start is not None and ts < start:
            return False
        if end is not None and ts > end:
            return False
        return True

    return _filter


def iter_records(
    records: Iterable[ExpenseRecord], pred: Callable[[ExpenseRecord], bool]
) -> Iterator[ExpenseRecord]:
    for r in records:
        if pred(r):
            yield r


def filter_records(
    records: Iterable[ExpenseRecord],
    date_range: Optional[DateRange] = None,
    category: Optional[str] = None,
) -> tuple[ExpenseRecord, ...]:
    """Narrow ``records`` to an inclusive date range and/or one category.

    Both clauses are optional; with neither, a new tuple holding the same
    records in the same order is returned.
    """
    result = tuple(records)
    before = len(result)
    if date_range is not None:
        result = tuple(filter(by_date_range(date_range), result))
    if category is not None:
        result = tuple(filter(by_category(category), result))
    logger.debug("filter_records kept %d of %d records", len(result), before)
    return result
