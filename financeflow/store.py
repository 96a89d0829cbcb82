import json
import logging
from typing import Tuple

from financeflow.domain import ExpenseRecord
from financeflow.functional import Either, Left, Right, validate_record

logger = logging.getLogger(__name__)

Records = Tuple[ExpenseRecord, ...]
Categories = Tuple[str, ...]


def load_seed(path: str) -> Tuple[Categories, Records, float]:
    """Read categories, expenses and the budget from a JSON seed file.

    Expenses that fail validation are skipped with a warning.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    categories: Categories = ()
    for name in data.get("categories", []):
        categories = add_category(categories, name)

    records = []
    for raw in data.get("expenses", []):
        result = validate_record(raw, categories)
        if result.is_left():
            logger.warning("Skipping seed expense %r: %s", raw, result.get_error()["message"])
            continue
        records.append(result.get_or_else(None))

    budget = float(data.get("budget", 0))
    logger.info("Loaded %d expenses in %d categories from %s", len(records), len(categories), path)
    return categories, tuple(records), budget


def record_to_dict(r: ExpenseRecord) -> dict:
    return {"category": r.category, "amount": r.amount, "date": r.occurred_at.isoformat()}


def save_seed(path: str, categories: Categories, records: Records, budget: float) -> None:
    data = {
        "categories": list(categories),
        "budget": budget,
        "expenses": [record_to_dict(r) for r in records],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def add_record(records: Records, r: ExpenseRecord) -> Records:
    return records + (r,)


def replace_record(records: Records, index: int, r: ExpenseRecord) -> Records:
    if not 0 <= index < len(records):
        raise IndexError(f"No expense at position {index}")
    return records[:index] + (r,) + records[index + 1:]


def remove_record(records: Records, index: int) -> Records:
    if not 0 <= index < len(records):
        raise IndexError(f"No expense at position {index}")
    return records[:index] + records[index + 1:]


def add_category(categories: Categories, name: str) -> Categories:
    name = name.strip()
    if not name or name in categories:
        return categories
    return categories + (name,)


def remove_category(
    categories: Categories, records: Records, name: str
) -> Either[dict, Categories]:
    in_use = sum(1 for r in records if r.category == name)
    if in_use:
        return Left({
            "error": "category_in_use",
            "message": f"Category {name} is used by {in_use} expense(s)",
            "category": name,
            "count": in_use,
        })
    return Right(tuple(c for c in categories if c != name))
