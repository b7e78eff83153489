# expense_api/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from expense_api.services.auth.tokens import TokenPair

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param name: Display name.
    :type name: str
    :param email: Login email (normalized by the model).
    :type email: str
    :param password: Raw password (hashed by the model).
    :type password: str
    """

    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public view of a user: never carries credential material.

    :param id: User identifier.
    :param name: Display name.
    :param email: Normalized email.
    """

    id: int
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Result of register/login/refresh: who the session is for and its tokens.

    :param user: Public user view.
    :type user: UserPublicOut
    :param tokens: Newly minted token pair.
    :type tokens: TokenPair
    """

    user: UserPublicOut
    tokens: TokenPair
