"""View-model helpers for the Streamlit UI.

Pure functions from store data to what gets rendered, so the display rules
(progress bar, over-budget colour, money and date formats) are testable
without a running Streamlit server.
"""

from datetime import datetime
from typing import Iterable, List, Optional

import pandas as pd
import plotly.graph_objects as go

from budget.domain import Category


def format_money(value: float) -> str:
    return f"${value:,.2f}"


def format_expense_date(dt: Optional[datetime]) -> str:
    # e.g. "Oct 16, 2026, 3:05 PM"
    if dt is None:
        return ""
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{dt:%b} {dt.day}, {dt.year}, {hour}:{dt.minute:02d} {suffix}"


def progress_ratio(spent: float, budget: float) -> float:
    """Fill level of a category progress bar, clamped to [0, 1]."""
    if budget <= 0:
        return 1.0 if spent > 0 else 0.0
    return max(0.0, min(spent / budget, 1.0))


def bar_color(spent: float, budget: float) -> str:
    return "red" if spent > 0 and spent >= budget else "blue"


def category_label(cat: Category) -> str:
    return f"{cat.name}: {format_money(cat.spent)} / {format_money(cat.budget)}"


def category_rows(categories: Iterable[Category]) -> List[dict]:
    return [
        {
            "Category": c.name,
            "Budget": c.budget,
            "Spent": c.spent,
            "Remaining": c.remaining,
            "Progress": progress_ratio(c.spent, c.budget),
        }
        for c in categories
    ]


def categories_frame(categories: Iterable[Category]) -> pd.DataFrame:
    return pd.DataFrame(
        category_rows(categories),
        columns=["Category", "Budget", "Spent", "Remaining", "Progress"],
    )


def spending_figure(df: pd.DataFrame) -> Optional[go.Figure]:
    if df.empty:
        return None
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df["Category"], y=df["Budget"], name="Budget"))
    fig.add_trace(go.Bar(
        x=df["Category"],
        y=df["Spent"],
        name="Spent",
        marker_color=[bar_color(s, b) for s, b in zip(df["Spent"], df["Budget"])],
    ))
    fig.update_layout(
        barmode="group",
        title="Spent vs budget",
        template="plotly_dark",
        margin=dict(t=40, b=10, l=10, r=10),
    )
    return fig
