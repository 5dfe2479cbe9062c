import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Tuple

from budget.domain import Category, Expense
from budget.events import (
    EventBus,
    EXPENSE_ADDED,
    register_default_handlers,
)
from budget.functional import Maybe, safe_category
from budget.reset import bind_cycle, with_cycle

logger = logging.getLogger(__name__)


class BudgetStore:
    """In-memory categories, expanded flags and derived totals.

    Every mutation swaps in a new ``categories`` tuple, categories themselves
    are never changed in place. Categories and expenses are looked up by id.
    """

    def __init__(
        self,
        categories: Tuple[Category, ...] = (),
        cycle_start: Optional[datetime] = None,
        bus: Optional[EventBus] = None,
    ):
        self.cycle_start = cycle_start
        self.categories: Tuple[Category, ...] = with_cycle(tuple(categories), cycle_start)
        self.expanded: frozenset = frozenset()
        self.bus = bus if bus is not None else register_default_handlers(EventBus())
        self.closed = False

    @property
    def total_budget(self) -> float:
        return sum(c.budget for c in self.categories)

    @property
    def total_spent(self) -> float:
        return sum(c.spent for c in self.categories)

    @property
    def remaining_balance(self) -> float:
        return self.total_budget - self.total_spent

    def find_category(self, category_id: Optional[str]) -> Maybe[Category]:
        return safe_category(self.categories, category_id)

    def toggle_expanded(self, category_id: str) -> None:
        if category_id in self.expanded:
            self.expanded = self.expanded - {category_id}
        else:
            self.expanded = self.expanded | {category_id}

    def is_expanded(self, category_id: str) -> bool:
        return category_id in self.expanded

    def replace_categories(
        self, categories: Tuple[Category, ...], cycle_start: Optional[datetime] = None
    ) -> None:
        if self.closed:
            return
        if cycle_start is not None:
            self.cycle_start = cycle_start
        self.categories = with_cycle(tuple(categories), self.cycle_start)
        known = {c.id for c in self.categories}
        self.expanded = frozenset(cid for cid in self.expanded if cid in known)

    def add_category(self, category: Category) -> bool:
        if self.closed:
            return False
        self.categories = self.categories + (bind_cycle(category, self.cycle_start),)
        return True

    def add_expense(self, category_id: str, expense: Expense) -> List[dict]:
        if self.closed:
            return []
        target = self.find_category(category_id)
        if target.is_none():
            logger.warning("Expense %s for unknown category %s dropped", expense.id, category_id)
            return []
        old = target.get_or_else(None)
        # created during this cycle, so it counts whatever date the server stamped
        updated = replace(old, expenses=old.expenses + (expense,))
        self.categories = tuple(updated if c.id == category_id else c for c in self.categories)
        return self.bus.publish(EXPENSE_ADDED, {
            "category_id": category_id,
            "category_name": updated.name,
            "expense_id": expense.id,
            "amount": expense.amount,
            "spent": updated.spent,
            "budget": updated.budget,
        })

    def remove_expense(self, expense_id: str) -> bool:
        """Drop an expense from whichever cycle holds it. Unknown ids are a no-op."""
        if self.closed:
            return False
        owner = next(
            (c for c in self.categories
             if any(e.id == expense_id for e in c.expenses + c.previous)),
            None,
        )
        if owner is None:
            return False
        updated = replace(
            owner,
            expenses=tuple(e for e in owner.expenses if e.id != expense_id),
            previous=tuple(e for e in owner.previous if e.id != expense_id),
        )
        self.categories = tuple(updated if c.id == owner.id else c for c in self.categories)
        return True

    def remove_category(self, category_id: str) -> bool:
        # the category's expenses leave the client view along with it
        if self.closed or self.find_category(category_id).is_none():
            return False
        self.categories = tuple(c for c in self.categories if c.id != category_id)
        self.expanded = self.expanded - {category_id}
        return True

    def close(self) -> None:
        self.closed = True
