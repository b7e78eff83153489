"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories, domain
models, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``expense_api/core/errors.py`` via ``BaseService.translate_exceptions()``.

Client-facing messages for credential and refresh failures are deliberately
generic; the precise reason is only logged by the service raising them.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError message mentions the constraint. SQLite
        reports the column instead (``users.email``), which is also accepted.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    # uq_<table>_<column> -> "<table>.<column>" as reported by SQLite
    parts = constraint_name.lower().split("_", 2)
    if len(parts) == 3 and parts[0] == "uq":
        return f"{parts[1]}.{parts[2]}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - The API layer translates them to ``APIError`` (400 unless a subclass
      says otherwise).
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is absent, or exists but belongs to someone else.

    :param entity: Entity name (e.g., "Expense").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


class InvalidCredentialsError(ServiceError):
    """Raised by login for an unknown email and a wrong password alike."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class AuthenticationError(ServiceError):
    """Raised when a request carries no usable credential (HTTP 401)."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    """The token's embedded expiry has passed."""

    def __init__(self, message: str = "Token expired") -> None:
        super().__init__(message)


class TokenInvalidError(AuthenticationError):
    """Bad signature, wrong token class, or malformed payload."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Raised when a well-formed credential is refused (HTTP 403)."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class RefreshTokenReuseError(ForbiddenError):
    """
    A validly signed refresh token no longer matches the stored hash.

    Reported to clients exactly like :class:`ForbiddenError`; only the logs
    tell the two apart.
    """

    def __init__(self, message: str = "Invalid refresh token") -> None:
        super().__init__(message)
