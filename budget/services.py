import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Set

from budget.domain import Category, Expense, Session
from budget.errors import InFlightError, TransportError
from budget.functional import validate_category_input, validate_expense_input
from budget.gateway import BudgetGateway
from budget.reset import check_and_reset
from budget.session import SessionGuard
from budget.store import BudgetStore

logger = logging.getLogger(__name__)


class BudgetService:
    """Facade for user actions: validate, call the backend, then update the store.

    The store is only touched after the backend call succeeded. Each operation
    holds an in-flight flag while its call is outstanding, so the same form
    cannot be submitted twice.
    """

    def __init__(self, gateway: BudgetGateway, store: BudgetStore):
        self.gateway = gateway
        self.store = store
        self.alerts: List[str] = []
        self._in_flight: Set[str] = set()

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        if operation in self._in_flight:
            raise InFlightError(operation)
        self._in_flight.add(operation)
        try:
            yield
        finally:
            self._in_flight.discard(operation)

    def is_busy(self, operation: str) -> bool:
        return operation in self._in_flight

    def _collect_alerts(self, results: List[dict]) -> None:
        for result in results:
            if "alert" in result:
                self.alerts.append(result["alert"])

    def load(self) -> bool:
        """Fetch categories into the store. Failures are logged, state is kept."""
        with self._guard("load"):
            try:
                categories = self.gateway.list_categories()
            except TransportError as e:
                logger.error("Error loading categories: %s", e.message)
                return False
        self.store.replace_categories(categories)
        return True

    def bootstrap(self, guard: SessionGuard, session: Session, now: datetime) -> Session:
        """Startup sequence for one application load.

        Fetch categories, run the monthly reset rule against ``now`` and bind
        the store to the resulting cycle. The marker is persisted only when a
        reset happened, whether or not the fetch succeeded.
        """
        self.load()
        session, categories, did_reset = check_and_reset(session, self.store.categories, now)
        self.store.replace_categories(categories, cycle_start=session.last_reset)
        if did_reset:
            guard.record_reset(session)
        return session

    def add_category(self, name, budget) -> Category:
        clean_name, amount = validate_category_input(name, budget).unwrap()
        with self._guard("add_category"):
            category = self.gateway.create_category(clean_name, amount)
        self.store.add_category(category)
        return category

    def add_expense(self, category_id: Optional[str], amount) -> Expense:
        category, value = validate_expense_input(self.store.categories, category_id, amount).unwrap()
        with self._guard("add_expense"):
            expense = self.gateway.create_expense(category.id, value)
        self._collect_alerts(self.store.add_expense(category.id, expense))
        return expense

    def remove_expense(self, expense_id: str) -> None:
        with self._guard("remove_expense"):
            self.gateway.delete_expense(expense_id)
        self.store.remove_expense(expense_id)

    def remove_category(self, category_id: str) -> None:
        with self._guard("remove_category"):
            self.gateway.delete_category(category_id)
        self.store.remove_category(category_id)

    def pop_alerts(self) -> List[str]:
        alerts, self.alerts = self.alerts, []
        return alerts
