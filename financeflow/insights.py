"""Global facts over the whole, unfiltered record collection."""

from collections import Counter
from typing import Iterable, Sequence, Tuple, Union

from financeflow.aggregation import total_spending
from financeflow.domain import BudgetStatus, ExpenseRecord, NO_DATA, NO_SPENDING
from financeflow.periods import local_time, weekday_name


def top_category(
    records: Iterable[ExpenseRecord], categories: Sequence[str]
) -> Union[Tuple[str, float], str]:
    totals = {name: 0 for name in categories}
    for r in records:
        if r.category in totals:
            totals[r.category] += r.amount

    best = None
    for name in categories:
        if best is None or totals[name] > best[1]:
            best = (name, totals[name])

    if best is None or all(t == 0 for t in totals.values()):
        return NO_SPENDING
    return best


def average_daily_spend(records: Iterable[ExpenseRecord]) -> float:
    records = tuple(records)
    if not records:
        return 0
    days = {local_time(r.occurred_at).date() for r in records}
    return total_spending(records) / len(days)


def most_active_weekday(records: Iterable[ExpenseRecord]) -> str:
    # Counter keeps insertion order, so max() resolves ties to the first seen
    counts = Counter(weekday_name(r.occurred_at) for r in records)
    if not counts:
        return NO_DATA
    return max(counts, key=counts.get)


def budget_status(records: Iterable[ExpenseRecord], budget: float) -> BudgetStatus:
    spent = total_spending(records)
    used_ratio = spent / budget if budget > 0 else 0.0
    return BudgetStatus(
        spent=spent,
        budget=budget,
        remaining=budget - spent,
        used_ratio=used_ratio,
        exceeded=budget > 0 and spent > budget,
    )
