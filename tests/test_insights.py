from datetime import datetime, timezone

import pytest

from financeflow.domain import NO_DATA, NO_SPENDING, ExpenseRecord
from financeflow.insights import (
    average_daily_spend,
    budget_status,
    most_active_weekday,
    top_category,
)


def make_rec(category, amount, ts):
    return ExpenseRecord(category=category, amount=amount, occurred_at=ts)


def make_sample():
    return (
        make_rec("Food", 20, datetime(2024, 1, 1, 12)),
        make_rec("Food", 30, datetime(2024, 1, 2, 9)),
        make_rec("Rent", 100, datetime(2024, 1, 15, 8)),
    )


def test_top_category():
    assert top_category(make_sample(), ("Food", "Rent")) == ("Rent", 100)


def test_top_category_tie_goes_to_first_declared():
    records = (
        make_rec("B", 10, datetime(2024, 1, 1)),
        make_rec("A", 10, datetime(2024, 1, 2)),
    )
    assert top_category(records, ("A", "B")) == ("A", 10)


def test_top_category_without_spending():
    assert top_category((), ("Food", "Rent")) == NO_SPENDING
    assert top_category((), ()) == NO_SPENDING


def test_top_category_ignores_undeclared_categories():
    records = make_sample() + (make_rec("Travel", 500, datetime(2024, 1, 3)),)
    assert top_category(records, ("Food", "Rent")) == ("Rent", 100)


def test_average_daily_spend_empty_is_zero():
    assert average_daily_spend(()) == 0


def test_average_daily_spend_single_day():
    records = (
        make_rec("Food", 20, datetime(2024, 1, 1, 8)),
        make_rec("Rent", 100, datetime(2024, 1, 1, 23, 59)),
        make_rec("Food", 5.5, datetime(2024, 1, 1, 0, 0)),
    )
    assert average_daily_spend(records) == pytest.approx(125.5)


def test_average_daily_spend_over_active_days():
    # 150 over three distinct days
    assert average_daily_spend(make_sample()) == pytest.approx(50)


def test_most_active_weekday():
    records = (
        make_rec("Food", 1, datetime(2024, 1, 1)),   # Monday
        make_rec("Food", 1, datetime(2024, 1, 2)),   # Tuesday
        make_rec("Food", 1, datetime(2024, 1, 9)),   # Tuesday
    )
    assert most_active_weekday(records) == "Tuesday"


def test_most_active_weekday_tie_goes_to_first_seen():
    records = (
        make_rec("Food", 1, datetime(2024, 1, 3)),   # Wednesday
        make_rec("Food", 1, datetime(2024, 1, 1)),   # Monday
    )
    assert most_active_weekday(records) == "Wednesday"


def test_most_active_weekday_empty():
    assert most_active_weekday(()) == NO_DATA


def test_budget_status_under_budget():
    status = budget_status(make_sample(), 300)
    assert status.spent == 150
    assert status.remaining == 150
    assert status.used_ratio == pytest.approx(0.5)
    assert not status.exceeded


def test_budget_status_exceeded():
    status = budget_status(make_sample(), 100)
    assert status.exceeded
    assert status.remaining == -50


def test_budget_status_without_budget():
    status = budget_status(make_sample(), 0)
    assert status.used_ratio == 0.0
    assert not status.exceeded


def test_weekday_and_day_count_use_local_calendar_for_aware_timestamps(eastern_tz):
    # both fall on Monday Jan 1 in UTC-5, though the second is Jan 2 in UTC
    records = (
        make_rec("Food", 10, datetime(2024, 1, 1, 15, tzinfo=timezone.utc)),
        make_rec("Food", 20, datetime(2024, 1, 2, 3, tzinfo=timezone.utc)),
    )
    assert most_active_weekday(records) == "Monday"
    assert average_daily_spend(records) == pytest.approx(30)
