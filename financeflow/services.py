import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from financeflow.aggregation import (
    aggregate_by_category,
    aggregate_by_period,
    category_shares,
    total_spending,
)
from financeflow.domain import DateRange, ExpenseRecord, MONTHLY
from financeflow.filters import filter_records
from financeflow.insights import (
    average_daily_spend,
    budget_status,
    most_active_weekday,
    top_category,
)

logger = logging.getLogger(__name__)

Calculator = Callable[["Snapshot", Sequence[ExpenseRecord], Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class Snapshot:
    records: tuple
    categories: tuple
    budget: float
    now: datetime


class DashboardService:
    """Facade that filters a snapshot and runs injected calculators over it.

    calculators: sequence of functions taking (snapshot, filtered_records, acc) -> dict
    Each output is merged into ``acc`` so later calculators can build on it.
    """

    def __init__(self, calculators: Sequence[Calculator]):
        self.calculators = calculators

    def report(
        self,
        snapshot: Snapshot,
        date_range: Optional[DateRange] = None,
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        filtered = filter_records(snapshot.records, date_range, category)
        report = {
            "filtered": filtered,
            "errors": [],
            "steps": [],
            "result": {},
        }

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            name = getattr(calc, "__name__", str(calc))
            try:
                out = calc(snapshot, filtered, acc)
            except Exception as e:
                logger.exception("Calculator %s failed", name)
                report["errors"].append(f"calculator_error: {name}: {e}")
                continue
            report["steps"].append({"calculator": name, "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report


def calc_totals(snapshot, filtered, acc):
    return {"total": total_spending(filtered), "count": len(filtered)}


def calc_category_breakdown(snapshot, filtered, acc):
    return {"by_category": category_shares(aggregate_by_category(filtered))}


def period_series(granularity: str) -> Calculator:
    def _series(snapshot, filtered, acc):
        return {f"{granularity}_series": aggregate_by_period(filtered, granularity, snapshot.now)}

    _series.__name__ = f"calc_{granularity}_series"
    return _series


def calc_insights(snapshot, filtered, acc):
    # insights describe the whole store, not the current filter
    return {
        "top_category": top_category(snapshot.records, snapshot.categories),
        "average_daily_spend": average_daily_spend(snapshot.records),
        "most_active_weekday": most_active_weekday(snapshot.records),
    }


def calc_budget(snapshot, filtered, acc):
    return {"budget": budget_status(snapshot.records, snapshot.budget)}


def default_calculators(granularity: str = MONTHLY) -> list:
    return [
        calc_totals,
        calc_category_breakdown,
        period_series(granularity),
        calc_insights,
        calc_budget,
    ]


def overview_calculators() -> list:
    return [calc_totals, calc_category_breakdown, calc_insights, calc_budget]
