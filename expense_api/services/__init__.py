"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`expense_api.services` without knowing internal
structure.

Re-exports
----------
- Base primitives (from ``expense_api.services._shared.base``)
    * :class:`BaseService`

- Shared DTOs (from ``expense_api.services._shared.dto``)
    * :class:`PaginationIn`
    * :class:`PageMeta`

- Session lifecycle (from ``expense_api.services.auth``)
    * :class:`SessionManager`, :class:`TokenCodec`, :class:`TokenClass`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`UserPublicOut`,
      :class:`SessionOut`

- Expenses (from ``expense_api.services.expenses``)
    * :class:`ExpenseService`, :class:`ExpenseReportService`
    * DTOs: :class:`ExpenseCreateIn`, :class:`ExpenseListIn`,
      :class:`ExpenseOut`, :class:`ExpenseListOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.dto import PageMeta, PaginationIn
from .auth.dto import LoginIn, RegisterIn, SessionOut, UserPublicOut
from .auth.service import SessionManager
from .auth.tokens import TokenClass, TokenCodec, TokenPair
from .expenses.dto import ExpenseCreateIn, ExpenseListIn, ExpenseListOut, ExpenseOut
from .expenses.reports import ExpenseReportService
from .expenses.service import ExpenseService

__all__ = [
    # Base
    "BaseService",
    # Shared DTOs
    "PaginationIn",
    "PageMeta",
    # Auth
    "SessionManager",
    "TokenCodec",
    "TokenClass",
    "TokenPair",
    "RegisterIn",
    "LoginIn",
    "UserPublicOut",
    "SessionOut",
    # Expenses
    "ExpenseService",
    "ExpenseReportService",
    "ExpenseCreateIn",
    "ExpenseListIn",
    "ExpenseOut",
    "ExpenseListOut",
]
