from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

DAILY = "daily"
MONTHLY = "monthly"
YEARLY = "yearly"
WEEK_RELATIVE = "week_relative"

GRANULARITIES = (DAILY, MONTHLY, YEARLY, WEEK_RELATIVE)

# Sentinels returned instead of raising on empty / insufficient data
NO_SPENDING = "No spending yet"
NO_DATA = "No data yet"
INSUFFICIENT_DATA = "Insufficient data"
PREDICTION_FAILED = "Prediction failed"


@dataclass(frozen=True)
class ExpenseRecord:
    category: str
    amount: float          # finite, positive by convention
    occurred_at: datetime  # wall-clock timestamp of the expense


@dataclass(frozen=True)
class DateRange:
    start: Optional[Union[date, datetime]] = None  # inclusive
    end: Optional[Union[date, datetime]] = None    # inclusive


@dataclass(frozen=True)
class BudgetStatus:
    spent: float
    budget: float
    remaining: float
    used_ratio: float
    exceeded: bool
