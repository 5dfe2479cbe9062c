"""HTTP client for the budget backend.

One method per backend resource. Every call is a single attempt with no
retry; failures are logged and raised as ``TransportError`` (or
``AuthError`` for login). The gateway never touches client state, callers
apply their local changes only after a call returns.
"""

import logging
from typing import Any, Optional, Tuple

import requests

from budget.domain import Category, Expense, category_from_api, expense_from_api
from budget.errors import AuthError, TransportError, ValidationError

logger = logging.getLogger(__name__)


class BudgetGateway:

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            r = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(f"Could not reach the server: {e}") from e

        if not 200 <= r.status_code < 300:
            logger.error("%s %s returned HTTP %s", method, url, r.status_code)
            raise TransportError(f"Server returned HTTP {r.status_code}", status_code=r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            logger.error("%s %s returned a non-JSON body", method, url)
            raise TransportError("Server returned an unreadable response") from e

    @staticmethod
    def _parse(parser, data: Any, what: str):
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed %s in server response: %r", what, data)
            raise TransportError(f"Server returned a malformed {what}") from e

    def list_categories(self) -> Tuple[Category, ...]:
        data = self._request("GET", "/categories")
        if not isinstance(data, list):
            raise TransportError("Server returned a malformed category list")
        categories = tuple(self._parse(category_from_api, c, "category") for c in data)
        logger.info("Loaded %d categories", len(categories))
        return categories

    def login(self, password: str) -> bool:
        # Wrong password and an unreachable server both block login.
        try:
            data = self._request("POST", "/auth/login", {"password": password})
        except TransportError as e:
            raise AuthError("Incorrect password.") from e
        if not isinstance(data, dict) or not data.get("success"):
            logger.warning("Login rejected")
            raise AuthError("Incorrect password.")
        logger.info("Login accepted")
        return True

    def create_category(self, name: str, budget: float) -> Category:
        if not name or not name.strip() or budget is None or budget <= 0:
            raise ValidationError("Please enter valid inputs.")
        data = self._request("POST", "/categories", {"name": name, "budget": budget})
        category = self._parse(category_from_api, data, "category")
        logger.info("Category added: %s (%s)", category.name, category.id)
        return category

    def create_expense(self, category_id: str, amount: float) -> Expense:
        if not category_id or amount is None or amount <= 0:
            raise ValidationError("Please enter a valid expense amount.")
        data = self._request("POST", "/expenses", {"amount": amount, "categoryId": category_id})
        expense = self._parse(lambda d: expense_from_api(d, category_id), data, "expense")
        logger.info("Expense added: %s to %s", expense.amount, category_id)
        return expense

    def delete_expense(self, expense_id: str) -> None:
        self._request("DELETE", f"/expenses/{expense_id}")
        logger.info("Expense removed: %s", expense_id)

    def delete_category(self, category_id: str) -> None:
        self._request("DELETE", f"/categories/{category_id}")
        logger.info("Category removed: %s", category_id)
