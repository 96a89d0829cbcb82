import math
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Callable, Generic, Sequence, TypeVar

from financeflow.domain import ExpenseRecord
from financeflow.periods import naive_local

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def is_left(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def is_left(self) -> bool:
        return False

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def is_left(self) -> bool:
        return True

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def parse_timestamp(value: Any) -> datetime:
    """Parse to a naive local wall-clock datetime, converting aware values."""
    if isinstance(value, datetime):
        return naive_local(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return naive_local(datetime.fromisoformat(value))
    raise ValueError(f"Unsupported timestamp {value!r}")


def validate_record(raw: dict, categories: Sequence[str]) -> Either[dict, ExpenseRecord]:
    """Turn raw input into an ExpenseRecord, or describe why it can't be.

    Accepts ``date`` as an alias of ``occurred_at``.
    """
    when = raw.get("occurred_at") or raw.get("date")
    for field, value in (("category", raw.get("category")), ("amount", raw.get("amount")), ("occurred_at", when)):
        if value is None or value == "":
            return Left({
                "error": "missing_field",
                "message": f"Field {field} is required",
                "field": field,
            })

    category = raw["category"]
    if category not in categories:
        return Left({
            "error": "category_not_found",
            "message": f"Category {category} does not exist",
            "category": category,
        })

    try:
        amount = float(raw["amount"])
    except (TypeError, ValueError):
        amount = math.nan
    if not math.isfinite(amount):
        return Left({
            "error": "invalid_amount",
            "message": f"Amount {raw['amount']!r} is not a finite number",
            "amount": raw["amount"],
        })

    try:
        occurred_at = parse_timestamp(when)
    except ValueError:
        return Left({
            "error": "invalid_date",
            "message": f"Date {when!r} could not be parsed",
            "date": when,
        })

    return Right(ExpenseRecord(category=category, amount=amount, occurred_at=occurred_at))


def validate_positive(record: ExpenseRecord) -> Either[dict, ExpenseRecord]:
    if record.amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": "Amount must be greater than zero",
            "amount": record.amount,
        })
    return Right(record)
