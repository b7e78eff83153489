"""
DTOs for the expense services.

Data Transfer Objects isolate the service layer from ORM models, ensuring
clear input/output contracts.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass

from expense_api.services._shared.dto import PageMeta

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ExpenseCreateIn:
    """
    Input DTO for creating an expense.

    :param amount: Non-negative amount.
    :type amount: float
    :param category: Category label.
    :type category: str
    :param description: Optional note.
    :type description: str | None
    :param date: Day of the expense; today when omitted.
    :type date: datetime.date | None
    """

    amount: float
    category: str
    description: str | None = None
    date: dt.date | None = None


@dataclass(frozen=True, slots=True)
class ExpenseListIn:
    """
    Input DTO for listing expenses.

    :param page: 1-based page number.
    :param limit: Page size.
    :param category: Optional exact category filter.
    """

    page: int = 1
    limit: int = 10
    category: str | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ExpenseOut:
    """Public view of one expense."""

    id: int
    amount: float
    category: str
    description: str | None
    date: dt.date


@dataclass(frozen=True, slots=True)
class ExpenseListOut:
    """A page of expenses plus its metadata."""

    items: list[ExpenseOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class MonthlySummaryOut:
    total: float
    count: int


@dataclass(frozen=True, slots=True)
class CategoryTotalOut:
    category: str
    total: float


@dataclass(frozen=True, slots=True)
class MonthTotalOut:
    month: int
    total: float

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class AverageDailyOut:
    """
    Month total and its per-calendar-day average.

    :param total: Sum of the month's expenses.
    :param average_daily: ``total / days_in_month`` rounded to 2 decimals.
    :param days_in_month: Number of calendar days used as divisor.
    """

    total: float
    average_daily: float
    days_in_month: int


@dataclass(frozen=True, slots=True)
class TopCategoryOut:
    """Most frequent category of a month (``None`` with count 0 when empty)."""

    category: str | None
    count: int
