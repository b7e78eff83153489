"""
ExpenseService
==============

Owner-scoped CRUD for the ``Expense`` aggregate. Every operation takes the
authenticated user's id; rows owned by anyone else behave exactly like rows
that do not exist.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from expense_api.core.cache import TTLCache
from expense_api.models.expense import Expense
from expense_api.repositories.expense import ExpenseRepository
from expense_api.services._shared.base import BaseService
from expense_api.services._shared.dto import PageMeta
from expense_api.services._shared.errors import NotFoundError
from expense_api.services.expenses.dto import (
    ExpenseCreateIn,
    ExpenseListIn,
    ExpenseListOut,
    ExpenseOut,
)
from expense_api.services.expenses.reports import resolve_cache, yearly_cache_key

log = logging.getLogger(__name__)


class ExpenseService(BaseService):
    """
    Application service for creating, listing, updating and deleting expenses.

    :param cache: Response cache whose yearly summaries are invalidated on
        every mutation; the app cache when omitted.
    """

    def __init__(self, *, cache: TTLCache | None = None) -> None:
        self.cache = resolve_cache(cache)

    # --------------------------------------------------------------------- #
    # Create
    # --------------------------------------------------------------------- #

    def create(self, owner_id: int, dto: ExpenseCreateIn) -> ExpenseOut:
        """
        Record a new expense for ``owner_id``.

        :param owner_id: Authenticated user id.
        :param dto: Validated input.
        :returns: The stored expense.
        """
        fields: dict[str, Any] = {
            "amount": dto.amount,
            "category": dto.category,
            "description": dto.description,
        }
        if dto.date is not None:
            fields["date"] = dto.date

        with self.rw_uow() as uow:
            repo: ExpenseRepository = uow.expenses
            expense = repo.create_for_owner(owner_id, **fields)
            out = self._to_out(expense)

        self._invalidate(owner_id, out.date.year)
        return out

    # --------------------------------------------------------------------- #
    # List
    # --------------------------------------------------------------------- #

    def list(self, owner_id: int, dto: ExpenseListIn) -> ExpenseListOut:
        """
        Page through the owner's expenses, newest date first.

        :param owner_id: Authenticated user id.
        :param dto: Page, limit and optional category filter.
        :returns: Items and page metadata.
        """
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit)
        pagination.sort = ["-date"]
        filters = {"category": dto.category} if dto.category else None

        with self.ro_uow() as uow:
            page = uow.expenses.paginate_owned(owner_id, pagination, filters=filters)
            items = [self._to_out(e) for e in page.items]

        return ExpenseListOut(
            items=items,
            meta=PageMeta(
                page=page.page,
                limit=page.limit,
                total=page.total,
                total_pages=page.total_pages,
                has_prev=page.has_prev,
                has_next=page.has_next,
            ),
        )

    # --------------------------------------------------------------------- #
    # Update
    # --------------------------------------------------------------------- #

    def update(self, owner_id: int, expense_id: int, changes: Mapping[str, Any]) -> ExpenseOut:
        """
        Apply whitelisted field changes to one of the owner's expenses.

        :param owner_id: Authenticated user id.
        :param expense_id: Target expense.
        :param changes: Subset of ``amount``, ``category``, ``description``,
            ``date``.
        :returns: The updated expense.
        :raises NotFoundError: If the expense is absent or not owned.
        """
        out: ExpenseOut | None = None
        with self.rw_uow() as uow:
            repo: ExpenseRepository = uow.expenses
            expense = repo.get_owned(owner_id, expense_id)
            if expense is not None:
                previous_year = expense.date.year
                repo.assign_updates(expense, changes, strict=True)
                out = self._to_out(expense)

        if out is None:
            raise NotFoundError("Expense", expense_id)

        self._invalidate(owner_id, previous_year, out.date.year)
        return out

    # --------------------------------------------------------------------- #
    # Delete
    # --------------------------------------------------------------------- #

    def delete(self, owner_id: int, expense_id: int) -> None:
        """
        Delete one of the owner's expenses.

        :raises NotFoundError: If the expense is absent or not owned.
        """
        year: int | None = None
        with self.rw_uow() as uow:
            repo: ExpenseRepository = uow.expenses
            expense = repo.get_owned(owner_id, expense_id)
            if expense is not None:
                year = expense.date.year
                repo.delete(expense)

        if year is None:
            raise NotFoundError("Expense", expense_id)
        self._invalidate(owner_id, year)

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #

    def _invalidate(self, owner_id: int, *years: int) -> None:
        for year in set(years):
            self.cache.delete(yearly_cache_key(owner_id, year))

    @staticmethod
    def _to_out(expense: Expense) -> ExpenseOut:
        return ExpenseOut(
            id=expense.id,
            amount=expense.amount,
            category=expense.category,
            description=expense.description,
            date=expense.date,
        )
