"""
ExpenseReportService
====================

Read-only aggregates over one user's expenses: monthly totals, category
breakdowns, inclusive date ranges, a cached yearly summary, average daily
spend and the most frequent category.

All totals are rounded to 2 decimals. Months are given as ``(month, year)``
and cover ``[first day, first day of next month)``.
"""

from __future__ import annotations

import calendar
import datetime as dt
import logging

from flask import current_app

from expense_api.core.cache import TTLCache
from expense_api.core.extensions import get_cache
from expense_api.repositories.expense import month_bounds
from expense_api.services._shared.base import BaseService
from expense_api.services._shared.errors import ServiceError
from expense_api.services.expenses.dto import (
    AverageDailyOut,
    CategoryTotalOut,
    MonthlySummaryOut,
    MonthTotalOut,
    TopCategoryOut,
)

log = logging.getLogger(__name__)

DEFAULT_SUMMARY_TTL = 60


def yearly_cache_key(owner_id: int, year: int) -> str:
    """Cache key of the yearly summary for ``owner_id``/``year``."""
    return f"yearly:{owner_id}:{year}"


def resolve_cache(cache: TTLCache | None) -> TTLCache:
    """Return ``cache`` or the cache installed on the current app."""
    return cache if cache is not None else get_cache()


def _money(value: float) -> float:
    return round(float(value), 2)


def _day_after(day: dt.date) -> dt.date | None:
    return None if day == dt.date.max else day + dt.timedelta(days=1)


class ExpenseReportService(BaseService):
    """
    Aggregate reports scoped to a single owner.

    :param cache: Cache for yearly summaries; the app cache when omitted.
    :param ttl: Seconds a yearly summary stays cached; defaults to
        ``SUMMARY_CACHE_TTL``.
    """

    def __init__(
        self,
        *,
        cache: TTLCache | None = None,
        ttl: int | None = None,
    ) -> None:
        self.cache = resolve_cache(cache)
        if ttl is None:
            ttl = int(current_app.config.get("SUMMARY_CACHE_TTL", DEFAULT_SUMMARY_TTL))
        self.ttl = ttl

    def monthly_summary(self, owner_id: int, month: int, year: int) -> MonthlySummaryOut:
        """Total and number of expenses in the given month."""
        start, end = month_bounds(year, month)
        with self.ro_uow() as uow:
            total, count = uow.expenses.sum_and_count(owner_id, start, end)
        return MonthlySummaryOut(total=_money(total), count=count)

    def category_breakdown(self, owner_id: int, month: int, year: int) -> list[CategoryTotalOut]:
        """Per-category totals of the month, largest first."""
        start, end = month_bounds(year, month)
        with self.ro_uow() as uow:
            rows = uow.expenses.totals_by_category(owner_id, start, end)
        return [CategoryTotalOut(category=cat, total=_money(total)) for cat, total in rows]

    def range_total(self, owner_id: int, start: dt.date, end: dt.date) -> float:
        """
        Sum of expenses dated between ``start`` and ``end``, both inclusive.

        :raises ServiceError: If ``start`` is after ``end``.
        """
        if start > end:
            raise ServiceError("start must be on or before end")
        with self.ro_uow() as uow:
            total, _ = uow.expenses.sum_and_count(owner_id, start, _day_after(end))
        return _money(total)

    def yearly_summary(self, owner_id: int, year: int) -> list[MonthTotalOut]:
        """
        Per-month totals for ``year`` (months without expenses are omitted).

        Results are cached per owner and year for ``ttl`` seconds; expense
        mutations drop the affected entries.
        """
        key = yearly_cache_key(owner_id, year)
        cached = self.cache.get(key)
        if cached is not None:
            log.debug("reports.yearly.cache_hit", extra={"event": "reports.yearly.cache_hit", "user_id": owner_id})
            return [MonthTotalOut(month=int(row["month"]), total=float(row["total"])) for row in cached]

        with self.ro_uow() as uow:
            rows = uow.expenses.totals_by_month(owner_id, year)
        result = [MonthTotalOut(month=m, total=_money(t)) for m, t in rows]
        self.cache.set(key, [row.to_dict() for row in result], ttl=self.ttl)
        return result

    def average_daily(self, owner_id: int, month: int, year: int) -> AverageDailyOut:
        """Month total divided by the number of calendar days in that month."""
        start, end = month_bounds(year, month)
        days = calendar.monthrange(year, month)[1]
        with self.ro_uow() as uow:
            total, _ = uow.expenses.sum_and_count(owner_id, start, end)
        return AverageDailyOut(
            total=_money(total),
            average_daily=_money(total / days),
            days_in_month=days,
        )

    def top_category(self, owner_id: int, month: int, year: int) -> TopCategoryOut:
        """Category with the most expenses in the month; ties break alphabetically."""
        start, end = month_bounds(year, month)
        with self.ro_uow() as uow:
            rows = uow.expenses.counts_by_category(owner_id, start, end)
        if not rows:
            return TopCategoryOut(category=None, count=0)
        category, count = rows[0]
        return TopCategoryOut(category=category, count=count)
