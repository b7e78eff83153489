"""Expense repository: owner-scoped CRUD plus aggregate queries for reports."""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import Integer, cast, extract, func, select

from expense_api.models.expense import Expense
from expense_api.repositories.base import OwnedRepository


def month_bounds(year: int, month: int) -> tuple[dt.date, dt.date | None]:
    """Return the first day of ``month`` and the first day of the next month.

    The upper bound is ``None`` for December of :data:`datetime.MAXYEAR`.
    """
    start = dt.date(year, month, 1)
    if month < 12:
        return start, dt.date(year, month + 1, 1)
    return start, _year_end(year)


def _year_end(year: int) -> dt.date | None:
    return dt.date(year + 1, 1, 1) if year < dt.MAXYEAR else None


class ExpenseRepository(OwnedRepository[Expense]):
    """Persistence-only repository for :class:`Expense`.

    Aggregates return plain Python values (floats, ints, tuples) so services
    never see result rows.
    """

    model = Expense

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "date": Expense.date,
            "amount": Expense.amount,
            "category": Expense.category,
            "created_at": Expense.created_at,
        }

    def _filterable_fields(self):
        return {"category": Expense.category}

    def _updatable_fields(self):
        return {"amount", "category", "description", "date"}

    # ---------------------------- Aggregates ----------------------------

    def _in_range(self, owner_id: int, start: dt.date, end_exclusive: dt.date | None):
        clauses = [Expense.user_id == owner_id, Expense.date >= start]
        if end_exclusive is not None:
            clauses.append(Expense.date < end_exclusive)
        return clauses

    def sum_and_count(
        self, owner_id: int, start: dt.date, end_exclusive: dt.date | None
    ) -> tuple[float, int]:
        """Total amount and row count for ``start <= date < end_exclusive``.

        An ``end_exclusive`` of ``None`` leaves the window open-ended.

        :returns: ``(total, count)``; ``(0.0, 0)`` when nothing matches.
        """
        stmt = select(
            func.coalesce(func.sum(Expense.amount), 0.0),
            func.count(Expense.id),
        ).where(*self._in_range(owner_id, start, end_exclusive))
        total, count = self.session.execute(stmt).one()
        return float(total or 0.0), int(count or 0)

    def totals_by_category(
        self, owner_id: int, start: dt.date, end_exclusive: dt.date | None
    ) -> list[tuple[str, float]]:
        """Per-category totals ordered by total descending, then category."""
        total = func.sum(Expense.amount).label("total")
        stmt = (
            select(Expense.category, total)
            .where(*self._in_range(owner_id, start, end_exclusive))
            .group_by(Expense.category)
            .order_by(total.desc(), Expense.category.asc())
        )
        return [(str(cat), float(amount)) for cat, amount in self.session.execute(stmt).all()]

    def counts_by_category(
        self, owner_id: int, start: dt.date, end_exclusive: dt.date | None
    ) -> list[tuple[str, int]]:
        """Per-category row counts ordered by count descending, then category."""
        count = func.count(Expense.id).label("count")
        stmt = (
            select(Expense.category, count)
            .where(*self._in_range(owner_id, start, end_exclusive))
            .group_by(Expense.category)
            .order_by(count.desc(), Expense.category.asc())
        )
        return [(str(cat), int(n)) for cat, n in self.session.execute(stmt).all()]

    def totals_by_month(self, owner_id: int, year: int) -> list[tuple[int, float]]:
        """Per-month totals for ``year`` ordered by month; empty months omitted."""
        start, _ = month_bounds(year, 1)
        end_exclusive = _year_end(year)
        month = cast(extract("month", Expense.date), Integer).label("month")
        stmt = (
            select(month, func.sum(Expense.amount))
            .where(*self._in_range(owner_id, start, end_exclusive))
            .group_by(month)
            .order_by(month.asc())
        )
        return [(int(m), float(t)) for m, t in self.session.execute(stmt).all()]

    def create_for_owner(self, owner_id: int, **fields: Any) -> Expense:
        """Build, validate and flush a new expense owned by ``owner_id``."""
        values = self._sanitize_update_fields(fields, strict=True)
        expense = Expense(user_id=owner_id, **values)
        return self.add(expense)
