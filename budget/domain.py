from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Expense:
    id: Optional[str]              # server-assigned
    amount: float
    date: Optional[datetime]       # creation timestamp
    category_id: Optional[str] = None


@dataclass(frozen=True)
class Category:
    id: Optional[str]              # None only for local placeholder data
    name: str                      # display only, never a lookup key
    budget: float
    expenses: tuple[Expense, ...] = ()   # current budget cycle
    previous: tuple[Expense, ...] = ()   # recorded before the last monthly reset

    @property
    def spent(self) -> float:
        return sum(e.amount for e in self.expenses)

    @property
    def remaining(self) -> float:
        return self.budget - self.spent

    @property
    def over_budget(self) -> bool:
        return self.spent > 0 and self.spent >= self.budget


# Client-side session state (login flag + last reset marker)
@dataclass(frozen=True)
class Session:
    authenticated: bool = False
    last_reset: Optional[datetime] = None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the backend into a naive local datetime.

    Aware values (``...Z`` or ``+02:00``) are converted to local time so they
    compare cleanly with ``datetime.now()``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _record_id(data: dict) -> Optional[str]:
    raw = data.get("_id", data.get("id"))
    return None if raw is None else str(raw)


def expense_from_api(data: dict, category_id: Optional[str] = None) -> Expense:
    cat_id = data.get("categoryId", data.get("category_id", category_id))
    return Expense(
        id=_record_id(data),
        amount=float(data["amount"]),
        date=parse_timestamp(data.get("date")),
        category_id=None if cat_id is None else str(cat_id),
    )


def category_from_api(data: dict) -> Category:
    # a server-side "spent" field is ignored, spent is derived from expenses
    cat_id = _record_id(data)
    return Category(
        id=cat_id,
        name=str(data["name"]),
        budget=float(data["budget"]),
        expenses=tuple(expense_from_api(e, cat_id) for e in data.get("expenses") or ()),
    )
