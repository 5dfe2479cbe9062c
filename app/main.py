import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import datetime

import streamlit as st

from budget.config import Config
from budget.errors import BudgetError, InFlightError, ValidationError, AuthError
from budget.gateway import BudgetGateway
from budget.logger import setup_logger
from budget.services import BudgetService
from budget.session import SessionGuard
from budget.storage import ClientStorage
from budget.store import BudgetStore
from budget.views import (
    categories_frame,
    category_label,
    format_expense_date,
    format_money,
    progress_ratio,
    spending_figure,
)

st.set_page_config(page_title="Monthly Budget", layout="centered")

if "logging_ready" not in st.session_state:
    Config.validate()
    setup_logger(level=Config.LOG_LEVEL)
    st.session_state.logging_ready = True

logger = logging.getLogger("budget.app")


def run_action(fn, failure_message, *args):
    """Run a user action; show a blocking error instead of raising."""
    try:
        return fn(*args), True
    except (ValidationError, InFlightError) as e:
        st.error(e.message)
    except BudgetError as e:
        logger.error("%s (%s)", failure_message, e.message)
        st.error(failure_message)
    return None, False


def reset_inputs(*keys):
    for key in keys:
        st.session_state.pop(key, None)


if "guard" not in st.session_state:
    st.session_state.guard = SessionGuard(ClientStorage(Config.STORAGE_PATH))
    st.session_state.session = st.session_state.guard.load()
    st.session_state.gateway = BudgetGateway(Config.API_URL, timeout=Config.request_timeout())

guard = st.session_state.guard
gateway = st.session_state.gateway


# --- Login gate
if not st.session_state.session.authenticated:
    st.title("🔒 Monthly Budget")
    with st.form("login_form"):
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")

    if submitted:
        try:
            st.session_state.session = guard.login(st.session_state.session, gateway, password)
        except AuthError as e:
            st.error(e.message)
        else:
            st.rerun()
    st.stop()


# --- Load categories and run the monthly reset once per load
if "store" not in st.session_state:
    store = BudgetStore()
    service = BudgetService(gateway, store)
    st.session_state.session = service.bootstrap(guard, st.session_state.session, datetime.now())
    st.session_state.store = store
    st.session_state.service = service
    st.session_state.show_add_category = False
    st.session_state.pending_delete = None

store: BudgetStore = st.session_state.store
service: BudgetService = st.session_state.service

with st.sidebar:
    st.markdown("### 👤 Session")
    if st.session_state.session.last_reset:
        st.caption(f"Budget cycle since {format_expense_date(st.session_state.session.last_reset)}")
    if st.button("Logout", key="btn_logout"):
        store.close()
        guard.logout(st.session_state.session)
        for key in list(st.session_state.keys()):
            del st.session_state[key]
        st.rerun()


# --- Dashboard
st.title("💰 Monthly Budget")

for alert in service.pop_alerts():
    st.warning(f"⚠️ {alert}")

k1, k2, k3 = st.columns(3)
with k1:
    st.metric("Total Budget", format_money(store.total_budget))
with k2:
    st.metric("Total Spent", format_money(store.total_spent))
with k3:
    st.metric("Remaining", format_money(store.remaining_balance))

fig = spending_figure(categories_frame(store.categories))
if fig is not None:
    st.plotly_chart(fig, use_container_width=True)


# --- Pending removal needs confirmation
pending = st.session_state.pending_delete
if pending:
    kind, target_id = pending
    st.warning(f"Are you sure you want to delete this {kind}?")
    c_yes, c_no = st.columns(2)
    if c_yes.button("Yes, delete", key="btn_confirm_delete"):
        if kind == "expense":
            _, ok = run_action(service.remove_expense, "Failed to remove expense.", target_id)
        else:
            _, ok = run_action(service.remove_category, "Failed to remove category.", target_id)
        if ok:
            st.session_state.pending_delete = None
            st.rerun()
    if c_no.button("Cancel", key="btn_cancel_delete"):
        st.session_state.pending_delete = None
        st.rerun()


# --- Category list
st.header("🗂 Categories")
if not store.categories:
    st.info("No categories yet. Add one below.")

for cat in store.categories:
    with st.container(border=True):
        if st.button(category_label(cat), key=f"toggle_{cat.id}", use_container_width=True):
            store.toggle_expanded(cat.id)
            st.rerun()
        st.progress(progress_ratio(cat.spent, cat.budget))
        if cat.over_budget:
            st.caption(":red[Budget reached]")

        if store.is_expanded(cat.id):
            if not cat.expenses and not cat.previous:
                st.caption("No expenses recorded.")
            listed = [(e, "") for e in cat.expenses] + [(e, " (previous cycle)") for e in cat.previous]
            for expense, note in listed:
                col_text, col_btn = st.columns([4, 1])
                col_text.write(
                    f"Expense: {format_money(expense.amount)}{note}  \n"
                    f"{format_expense_date(expense.date)}"
                )
                if col_btn.button("Remove", key=f"rm_expense_{expense.id}"):
                    st.session_state.pending_delete = ("expense", expense.id)
                    st.rerun()
            if st.button("Delete category", key=f"rm_category_{cat.id}", type="primary"):
                st.session_state.pending_delete = ("category", cat.id)
                st.rerun()


# --- Add category
st.divider()
toggle_label = "Hide form" if st.session_state.show_add_category else "➕ Add Category"
if st.button(toggle_label, key="btn_toggle_add_category"):
    st.session_state.show_add_category = not st.session_state.show_add_category
    st.rerun()

if st.session_state.show_add_category:
    with st.form("add_category_form"):
        name = st.text_input("Category name", key="new_category_name")
        budget = st.text_input("Budget", key="new_category_budget")
        submitted = st.form_submit_button(
            "Add Category", disabled=service.is_busy("add_category")
        )
    if submitted:
        _, ok = run_action(service.add_category, "Failed to add category.", name, budget)
        if ok:
            reset_inputs("new_category_name", "new_category_budget")
            st.session_state.show_add_category = False
            st.rerun()


# --- Add expense
st.subheader("🧾 Add Expense")
if store.categories:
    with st.form("add_expense_form"):
        ids = [c.id for c in store.categories]
        names = {c.id: c.name for c in store.categories}
        category_id = st.selectbox(
            "Category", ids, index=0, format_func=lambda cid: names.get(cid, cid),
            key="new_expense_category",
        )
        amount = st.text_input("Amount", key="new_expense_amount")
        submitted = st.form_submit_button(
            "Add Expense", disabled=service.is_busy("add_expense")
        )
    if submitted:
        _, ok = run_action(service.add_expense, "Failed to add expense.", category_id, amount)
        if ok:
            reset_inputs("new_expense_amount")
            st.rerun()
else:
    st.caption("Create a category before adding expenses.")
