"""User model definition for the expense tracker."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from expense_api.core.extensions import db
from expense_api.security.hashing import hash_secret, verify_secret

from .base import PKMixin, ReprMixin, TimestampMixin


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity and credential holder.

    Fields
    ------
    name : str
        Display name, trimmed and non-empty.
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Salted hash of the password (write-only setter via ``password``).
    refresh_token_hash : str | None
        Salted hash of the single currently valid refresh token, or ``None``
        when no session is active.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).

    Notes
    -----
    Both hash columns are deferred: ordinary reads never load them, and no
    serializer in the API layer exposes them.
    """

    __tablename__ = "users"
    __repr_attrs__ = ("email",)

    # Columns
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, deferred=True)
    refresh_token_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True, deferred=True
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        Hashing only happens on assignment, so saving a user for any other
        reason never re-hashes the stored value.

        :param raw: Plain text password to hash.
        :type raw: str
        :raises ValueError: If ``raw`` is empty.
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = hash_secret(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        return verify_secret(raw, self.password_hash)

    # -------------------- Refresh token API --------------------
    def set_refresh_token(self, raw: str) -> str:
        """
        Store the hash of a freshly minted refresh token.

        :param raw: Encoded refresh token handed to the client.
        :returns: The stored hash.
        :rtype: str
        """
        self.refresh_token_hash = hash_secret(raw)
        return self.refresh_token_hash

    def verify_refresh_token(self, raw: str) -> bool:
        """Return ``True`` when ``raw`` is the current refresh token."""
        return verify_secret(raw, self.refresh_token_hash)

    def clear_refresh_token(self) -> None:
        """Forget the current refresh token, ending the session."""
        self.refresh_token_hash = None

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        """Trim the display name and reject blank values."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()
