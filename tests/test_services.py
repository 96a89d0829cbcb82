from datetime import date, datetime

from financeflow.domain import DateRange, ExpenseRecord, MONTHLY, YEARLY
from financeflow.services import (
    DashboardService,
    Snapshot,
    calc_budget,
    calc_insights,
    calc_totals,
    default_calculators,
    overview_calculators,
    period_series,
)


def make_snapshot():
    records = (
        ExpenseRecord("Food", 20, datetime(2024, 1, 1, 12)),
        ExpenseRecord("Food", 30, datetime(2024, 1, 2, 9)),
        ExpenseRecord("Rent", 100, datetime(2024, 1, 15, 8)),
    )
    return Snapshot(records=records, categories=("Food", "Rent"), budget=200, now=datetime(2024, 1, 20))


def test_default_report_end_to_end():
    rpt = DashboardService(default_calculators(MONTHLY)).report(make_snapshot())
    res = rpt["result"]

    assert rpt["errors"] == []
    assert res["total"] == 150
    assert res["count"] == 3
    assert [(c, t) for c, t, _ in res["by_category"]] == [("Food", 50), ("Rent", 100)]
    assert res["monthly_series"] == [("Jan", 150)]
    assert res["top_category"] == ("Rent", 100)
    assert res["budget"].remaining == 50


def test_insights_ignore_the_filter():
    svc = DashboardService([calc_totals, calc_insights, calc_budget])
    rpt = svc.report(make_snapshot(), DateRange(start=date(2024, 1, 1), end=date(2024, 1, 2)), "Food")

    assert rpt["filtered"] == make_snapshot().records[:2]
    assert rpt["result"]["total"] == 50
    assert rpt["result"]["top_category"] == ("Rent", 100)
    assert rpt["result"]["budget"].spent == 150


def test_steps_are_recorded_in_order():
    svc = DashboardService([calc_totals, period_series(YEARLY)])
    rpt = svc.report(make_snapshot())

    assert [s["calculator"] for s in rpt["steps"]] == ["calc_totals", "calc_yearly_series"]
    assert rpt["result"]["yearly_series"] == [("2024", 150)]


def test_calculators_can_read_earlier_results():
    def calc_average(snapshot, filtered, acc):
        return {"average": acc["total"] / acc["count"] if acc["count"] else 0}

    rpt = DashboardService([calc_totals, calc_average]).report(make_snapshot())
    assert rpt["result"]["average"] == 50


def test_failing_calculator_is_reported():
    def calc_broken(snapshot, filtered, acc):
        raise RuntimeError("oops")

    rpt = DashboardService([calc_broken, calc_totals]).report(make_snapshot())

    assert rpt["errors"] == ["calculator_error: calc_broken: oops"]
    assert rpt["result"]["total"] == 150


def test_empty_snapshot_report():
    empty = Snapshot(records=(), categories=("Food",), budget=0, now=datetime(2024, 1, 1))
    res = DashboardService(default_calculators()).report(empty)["result"]

    assert res["total"] == 0
    assert res["by_category"] == []
    assert res["monthly_series"] == []
    assert res["average_daily_spend"] == 0


def test_overview_report_has_no_period_series():
    calculators = overview_calculators()
    names = [c.__name__ for c in calculators]
    assert not any(name.endswith("_series") for name in names)

    res = DashboardService(calculators).report(make_snapshot())["result"]
    assert not any(key.endswith("_series") for key in res)
    assert res["total"] == 150
    assert [(c, t) for c, t, _ in res["by_category"]] == [("Food", 50), ("Rent", 100)]
    assert res["top_category"] == ("Rent", 100)
    assert res["budget"].remaining == 50
