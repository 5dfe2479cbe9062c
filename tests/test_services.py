from datetime import datetime

import pytest

from budget.domain import Category, Expense
from budget.errors import InFlightError, TransportError, ValidationError
from budget.services import BudgetService
from budget.session import SessionGuard
from budget.store import BudgetStore

from conftest import make_categories


def make_service(fake_gateway, store=None):
    return BudgetService(fake_gateway, store if store is not None else BudgetStore(make_categories()))


def spent(service, cid):
    return service.store.find_category(cid).get_or_else(None).spent


def test_load_replaces_categories(fake_gateway):
    fake_gateway.categories = make_categories()[:2]
    service = make_service(fake_gateway, BudgetStore())
    assert service.load() is True
    assert [c.id for c in service.store.categories] == ["c1", "c2"]


def test_load_failure_keeps_state(fake_gateway):
    fake_gateway.fail = True
    service = make_service(fake_gateway)
    assert service.load() is False
    assert service.store.categories == make_categories()


def test_add_expense(fake_gateway):
    service = make_service(fake_gateway)
    expense = service.add_expense("c1", "25")
    assert expense.amount == 25
    assert spent(service, "c1") == 175


@pytest.mark.parametrize("amount", ["", "abc", "0", "-4", "nan", "inf"])
def test_add_expense_invalid_amount_makes_no_call(fake_gateway, amount):
    service = make_service(fake_gateway)
    with pytest.raises(ValidationError):
        service.add_expense("c1", amount)
    assert fake_gateway.calls == []


def test_add_expense_without_category(fake_gateway):
    service = make_service(fake_gateway)
    with pytest.raises(ValidationError):
        service.add_expense(None, "10")
    assert fake_gateway.calls == []


def test_add_expense_failure_leaves_store_unchanged(fake_gateway):
    service = make_service(fake_gateway)
    fake_gateway.fail = True
    with pytest.raises(TransportError):
        service.add_expense("c1", "25")
    assert spent(service, "c1") == 150
    assert not service.is_busy("add_expense")


def test_add_category(fake_gateway):
    service = make_service(fake_gateway)
    budget_before = service.store.total_budget
    cat = service.add_category("  Travel ", "300")
    assert cat.name == "Travel"
    assert service.store.total_budget == budget_before + 300


@pytest.mark.parametrize("name,budget", [("", "100"), ("Travel", "0"), ("Travel", "x")])
def test_add_category_invalid(fake_gateway, name, budget):
    service = make_service(fake_gateway)
    with pytest.raises(ValidationError):
        service.add_category(name, budget)
    assert fake_gateway.calls == []


def test_remove_expense_and_category(fake_gateway):
    service = make_service(fake_gateway)
    service.remove_expense("e1")
    assert spent(service, "c1") == 100
    service.remove_category("c3")
    assert [c.id for c in service.store.categories] == ["c1", "c2"]


def test_remove_failure_keeps_expense(fake_gateway):
    service = make_service(fake_gateway)
    fake_gateway.fail = True
    with pytest.raises(TransportError):
        service.remove_expense("e1")
    assert spent(service, "c1") == 150


def test_double_submit_is_rejected_while_first_call_is_outstanding(fake_gateway):
    service = make_service(fake_gateway)
    checked = {}

    def slow_create_expense(category_id, amount):
        with pytest.raises(InFlightError):
            service.add_expense("c1", "10")
        checked["nested"] = True
        return Expense("e9", amount, datetime.now(), category_id)

    fake_gateway.create_expense = slow_create_expense
    service.add_expense("c1", "25")
    assert checked["nested"]
    assert spent(service, "c1") == 175
    assert not service.is_busy("add_expense")


def test_over_budget_alert_collected(fake_gateway):
    store = BudgetStore((Category("c1", "Fun", 100),))
    service = make_service(fake_gateway, store)
    service.add_expense("c1", "100")
    alerts = service.pop_alerts()
    assert len(alerts) == 1
    assert service.pop_alerts() == []


def test_results_after_close_are_discarded(fake_gateway):
    service = make_service(fake_gateway)
    service.store.close()
    service.add_expense("c1", "25")
    assert spent(service, "c1") == 150


def test_bootstrap_across_loads(fake_gateway, storage):
    guard = SessionGuard(storage)
    fake_gateway.categories = (Category("c1", "Groceries", 500, (
        Expense("e1", 40, datetime(2026, 9, 20)),
        Expense("e2", 60, datetime(2026, 10, 2)),
    )),)

    # first load ever: no marker, reset fires and the marker is saved
    first = datetime(2026, 10, 3, 9, 0)
    service = make_service(fake_gateway, BudgetStore())
    session = service.bootstrap(guard, guard.load(), first)
    assert session.last_reset == first
    assert guard.load().last_reset == first
    assert service.store.total_spent == 0

    # an expense added after the reset counts on the next load
    fake_gateway.categories = (Category("c1", "Groceries", 500,
                                        fake_gateway.categories[0].expenses + (
                                            Expense("e3", 25, datetime(2026, 10, 5)),)),)

    # same month: marker reused, not rewritten
    service = make_service(fake_gateway, BudgetStore())
    session = service.bootstrap(guard, guard.load(), datetime(2026, 10, 20, 18, 0))
    assert session.last_reset == first
    assert guard.load().last_reset == first
    assert service.store.total_spent == 25

    # next month: new marker, spent back to zero
    later = datetime(2026, 11, 1, 8, 0)
    service = make_service(fake_gateway, BudgetStore())
    session = service.bootstrap(guard, guard.load(), later)
    assert session.last_reset == later
    assert guard.load().last_reset == later
    assert service.store.total_spent == 0


def test_bootstrap_failed_load_still_records_reset(fake_gateway, storage):
    guard = SessionGuard(storage)
    fake_gateway.fail = True
    now = datetime(2026, 10, 16, 12, 0)
    service = make_service(fake_gateway, BudgetStore())
    session = service.bootstrap(guard, guard.load(), now)
    assert service.store.categories == ()
    assert session.last_reset == now
    assert guard.load().last_reset == now


def test_expense_added_after_bootstrap_counts_despite_server_clock(fake_gateway, storage):
    guard = SessionGuard(storage)
    fake_gateway.categories = (Category("c1", "Groceries", 500),)
    now = datetime(2026, 10, 16, 12, 0, 0)
    service = make_service(fake_gateway, BudgetStore())
    service.bootstrap(guard, guard.load(), now)

    fake_gateway.create_expense = lambda category_id, amount: Expense(
        "e1", amount, datetime(2026, 10, 16, 11, 59, 58), category_id)
    service.add_expense("c1", "25")
    assert spent(service, "c1") == 25
