"""Calendar keys used to bucket expense timestamps.

Labels are built from fixed English names rather than ``strftime`` so that
bucket identity does not depend on the process locale. Timezone-aware
timestamps are converted to the local zone first; naive ones, including
``now`` and date range bounds, are taken as local wall-clock time.
"""

from datetime import datetime, timedelta
from typing import Optional

from financeflow.domain import DAILY, MONTHLY, YEARLY, WEEK_RELATIVE, GRANULARITIES

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday",
            "Friday", "Saturday", "Sunday")

WEEK = timedelta(days=7)


def local_time(ts: datetime) -> datetime:
    if ts.tzinfo is not None:
        return ts.astimezone()
    return ts


def naive_local(ts: datetime) -> datetime:
    """Drop the zone after converting to local time, so aware and naive values compare."""
    if ts.tzinfo is not None:
        return ts.astimezone().replace(tzinfo=None)
    return ts


def day_label(ts: datetime) -> str:
    ts = local_time(ts)
    return f"{MONTH_ABBR[ts.month - 1]} {ts.day}"


def month_label(ts: datetime) -> str:
    return MONTH_ABBR[local_time(ts).month - 1]


def year_label(ts: datetime) -> str:
    return f"{local_time(ts).year:04d}"


def week_index(ts: datetime, now: datetime) -> int:
    """Whole 7-day periods between ``ts`` and ``now``, floored.

    Records after ``now`` give a negative index.
    """
    return (naive_local(now) - naive_local(ts)) // WEEK


def week_label(index: int) -> str:
    return f"Week {index + 1}"


def weekday_name(ts: datetime) -> str:
    return WEEKDAYS[local_time(ts).weekday()]


def bucket_label(ts: datetime, granularity: str, now: Optional[datetime] = None) -> str:
    if granularity == DAILY:
        return day_label(ts)
    if granularity == MONTHLY:
        return month_label(ts)
    if granularity == YEARLY:
        return year_label(ts)
    if granularity == WEEK_RELATIVE:
        if now is None:
            raise ValueError("week_relative bucketing needs an explicit 'now'")
        return week_label(week_index(ts, now))
    raise ValueError(f"Unknown granularity {granularity!r}, expected one of {GRANULARITIES}")
