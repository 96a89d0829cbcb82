from datetime import datetime
from typing import Iterable

from financeflow.domain import ExpenseRecord
from financeflow.periods import local_time

EXPORT_MIME = "text/csv"
EXPORT_HEADER = "Date,Category,Amount"


def format_date(ts) -> str:
    """en-US short locale date, e.g. ``1/15/2024``."""
    if not isinstance(ts, datetime):
        return str(ts)
    ts = local_time(ts)
    return f"{ts.month}/{ts.day}/{ts.year}"


def format_amount(amount) -> str:
    # integral floats print without ".0", like a JavaScript number
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


def export_row(r: ExpenseRecord) -> str:
    return ",".join((format_date(r.occurred_at), str(r.category), format_amount(r.amount)))


def export_csv(records: Iterable[ExpenseRecord]) -> str:
    """Serialize records to CSV text in input order.

    Fields are joined as is, without quoting. Malformed values are
    stringified rather than rejected.
    """
    return "\n".join([EXPORT_HEADER] + [export_row(r) for r in records])


def export_bytes(records: Iterable[ExpenseRecord]) -> bytes:
    return export_csv(records).encode("utf-8")


def export_filename(now: datetime) -> str:
    return f"expenses_{now:%Y-%m-%d}.csv"
