import json
from datetime import datetime

import pytest

from budget.domain import Category, Expense
from budget.errors import AuthError, TransportError
from budget.gateway import BudgetGateway
from budget.storage import ClientStorage
from budget.store import BudgetStore


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")

    def json(self):
        return json.loads(self.content)


class FakeSession:
    """Stands in for requests.Session: replays queued responses, records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


class FakeGateway:
    """In-memory backend with the BudgetGateway interface."""

    def __init__(self, password="secret"):
        self.password = password
        self.categories = ()
        self.fail = False
        self.calls = []
        self._next = 100

    def _id(self):
        self._next += 1
        return str(self._next)

    def _check(self, name):
        self.calls.append(name)
        if self.fail:
            raise TransportError("backend down")

    def list_categories(self):
        self._check("list_categories")
        return self.categories

    def login(self, password):
        self.calls.append("login")
        if password != self.password:
            raise AuthError("Incorrect password.")
        return True

    def create_category(self, name, budget):
        self._check("create_category")
        return Category(self._id(), name, budget)

    def create_expense(self, category_id, amount):
        self._check("create_expense")
        return Expense(self._id(), amount, datetime.now(), category_id)

    def delete_expense(self, expense_id):
        self._check("delete_expense")

    def delete_category(self, category_id):
        self._check("delete_category")


def make_expense(id, amount, date=None, category_id="c1"):
    return Expense(id=id, amount=amount, date=date or datetime(2026, 10, 5, 9, 30), category_id=category_id)


def make_categories():
    return (
        Category("c1", "Groceries", 500, (make_expense("e1", 50), make_expense("e2", 100))),
        Category("c2", "Rent", 1000, (make_expense("e3", 1000, category_id="c2"),)),
        Category("c3", "Entertainment", 200, (make_expense("e4", 50, category_id="c3"),)),
    )


@pytest.fixture
def store():
    return BudgetStore(make_categories())


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def storage(tmp_path):
    return ClientStorage(tmp_path / "state.json")


@pytest.fixture
def http():
    def _make(*responses):
        session = FakeSession(*responses)
        return BudgetGateway("http://api.test/api/", session=session), session
    return _make
