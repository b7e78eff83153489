"""Expense model: a single dated spending record owned by one user."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import CheckConstraint, Date, Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from expense_api.core.extensions import db

from .base import OwnedMixin, PKMixin, ReprMixin, TimestampMixin

CATEGORY_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200


class Expense(PKMixin, OwnedMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Spending record scoped to its owner.

    Fields
    ------
    user_id : int
        Owning user (from :class:`OwnedMixin`).
    amount : float
        Non-negative amount.
    category : str
        Free-form category label, trimmed.
    description : str | None
        Optional note, up to 200 characters.
    date : date
        Calendar day the expense applies to; defaults to today.
    """

    __tablename__ = "expenses"
    __repr_attrs__ = ("category", "amount", "date")

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(CATEGORY_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, default=dt.date.today)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="amount_non_negative"),
        Index("ix_expenses_user_id_date", "user_id", "date"),
        Index("ix_expenses_user_id_category", "user_id", "category"),
    )

    # -------------------- Validators --------------------
    @validates("amount")
    def _validate_amount(self, key: str, value: float) -> float:
        """
        Reject negative amounts.

        :raises ValueError: If ``value`` is negative or not numeric.
        """
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValueError("Amount must be a number.")
        if value < 0:
            raise ValueError("Amount must be non-negative.")
        return float(value)

    @validates("category")
    def _normalize_category(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Category is required.")
        return value.strip()

    @validates("description")
    def _normalize_description(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise ValueError("Description is too long.")
        return value or None
