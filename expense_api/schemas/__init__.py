"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, RegisterSchema
from .common import (
    DateRangeQuerySchema,
    MetaSchema,
    MonthYearQuerySchema,
    PaginationQuerySchema,
    YearQuerySchema,
)
from .expense import (
    ExpenseCreateSchema,
    ExpenseListQuerySchema,
    ExpenseSchema,
    ExpenseUpdateSchema,
)
from .user import UserSchema

__all__ = [
    "LoginSchema",
    "RegisterSchema",
    "PaginationQuerySchema",
    "MonthYearQuerySchema",
    "YearQuerySchema",
    "DateRangeQuerySchema",
    "MetaSchema",
    "ExpenseCreateSchema",
    "ExpenseUpdateSchema",
    "ExpenseListQuerySchema",
    "ExpenseSchema",
    "UserSchema",
]
