"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from expense_api.repositories.base import (
    BaseRepository,
    OwnedRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from expense_api.repositories.expense import ExpenseRepository
from expense_api.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "OwnedRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "apply_sorting",
    # Domain
    "ExpenseRepository",
    "UserRepository",
]
