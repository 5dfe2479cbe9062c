import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Tuple

from budget.domain import Category, Session

logger = logging.getLogger(__name__)


def should_reset(last_reset: Optional[datetime], now: datetime) -> bool:
    if last_reset is None:
        return True
    return (last_reset.year, last_reset.month) != (now.year, now.month)


def bind_cycle(category: Category, cycle_start: Optional[datetime]) -> Category:
    """Split a category's expenses around ``cycle_start``.

    Expenses dated before it move to ``previous``; the rest (and undated
    ones) stay in ``expenses`` and make up ``spent``.
    """
    every = category.previous + category.expenses
    if cycle_start is None:
        return replace(category, expenses=every, previous=())
    before = tuple(e for e in every if e.date is not None and e.date < cycle_start)
    current = tuple(e for e in every if e.date is None or e.date >= cycle_start)
    return replace(category, expenses=current, previous=before)


def with_cycle(
    categories: Tuple[Category, ...], cycle_start: Optional[datetime]
) -> Tuple[Category, ...]:
    return tuple(bind_cycle(c, cycle_start) for c in categories)


def apply_reset(
    categories: Tuple[Category, ...], now: datetime
) -> Tuple[Category, ...]:
    """Start a new cycle at ``now``: every expense recorded so far becomes previous."""
    return with_cycle(categories, now)


def check_and_reset(
    session: Session, categories: Tuple[Category, ...], now: datetime
) -> Tuple[Session, Tuple[Category, ...], bool]:
    """Run the monthly reset rule once for this load.

    Returns the (possibly updated) session, the categories bound to the
    current cycle, and whether a reset happened. Persisting the new marker is
    left to the caller.
    """
    if should_reset(session.last_reset, now):
        logger.info("New month (last reset: %s), resetting spent totals", session.last_reset)
        return replace(session, last_reset=now), apply_reset(categories, now), True
    return session, with_cycle(categories, session.last_reset), False
