"""Idempotent demo data for local development environments."""

from __future__ import annotations

import datetime as dt
import logging

from expense_api.models.user import User
from expense_api.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)

DEMO_NAME = "Demo User"
DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demoPass123"

CATEGORIES: tuple[str, ...] = (
    "Groceries",
    "Transport",
    "Utilities",
    "Dining",
    "Entertainment",
    "Health",
)


def demo_expenses(count: int, *, today: dt.date) -> list[dict[str, object]]:
    """Return ``count`` deterministic expense rows dated within ``today``'s year.

    Rows cycle through :data:`CATEGORIES` and the months elapsed so far, so
    every report endpoint has something to show.
    """
    rows: list[dict[str, object]] = []
    for index in range(count):
        month = index % today.month + 1
        day = (index * 7) % 28 + 1
        when = dt.date(today.year, month, day)
        if when > today:
            when = today
        rows.append(
            {
                "amount": round(5 + (index * 13.37) % 120, 2),
                "category": CATEGORIES[index % len(CATEGORIES)],
                "description": f"Sample expense #{index + 1}",
                "date": when,
            }
        )
    return rows


def seed_demo(
    *,
    email: str = DEMO_EMAIL,
    password: str = DEMO_PASSWORD,
    count: int = 24,
    today: dt.date | None = None,
    verbose: bool = False,
) -> dict[str, dict[str, int]]:
    """Create (or reuse) the demo account and top up its sample expenses.

    :param email: Demo login email.
    :param password: Demo password, set only when the account is created.
    :param count: Number of expenses the demo account should have this year.
    :param today: Reference date; defaults to :func:`datetime.date.today`.
    :returns: ``{"users": {...}, "expenses": {...}}`` created/existing counters.
    """
    today = today or dt.date.today()
    summary: dict[str, dict[str, int]] = {
        "users": {"created": 0, "existing": 0},
        "expenses": {"created": 0, "existing": 0},
    }
    if verbose:
        LOGGER.info("Seeding demo account %s...", email)

    with SQLAlchemyUnitOfWork() as uow:
        user = uow.users.get_by_email(email)
        if user is None:
            user = User(name=DEMO_NAME, email=email)
            user.password = password
            uow.users.add(user)
            summary["users"]["created"] += 1
        else:
            summary["users"]["existing"] += 1

        year_start = dt.date(today.year, 1, 1)
        _, existing = uow.expenses.sum_and_count(
            user.id, year_start, dt.date(today.year + 1, 1, 1)
        )
        summary["expenses"]["existing"] = existing
        for row in demo_expenses(count, today=today)[existing:]:
            uow.expenses.create_for_owner(user.id, **row)
            summary["expenses"]["created"] += 1

    return summary


__all__ = ["seed_demo", "demo_expenses", "CATEGORIES"]
