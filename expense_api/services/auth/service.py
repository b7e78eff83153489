# expense_api/services/auth/service.py
"""
SessionManager
==============

Owns the session lifecycle of a user account: registration, login, refresh
with rotation and reuse detection, and logout.

A session is the pair of tokens minted together; the server only remembers
the hash of the refresh token on the user row. Every successful register,
login or refresh overwrites that hash, so at most one refresh token is valid
per user at any time.
"""

from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from expense_api.repositories.user import UserRepository
from expense_api.security.hashing import hash_secret
from expense_api.services._shared.base import BaseService
from expense_api.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    RefreshTokenReuseError,
    violates,
)
from expense_api.services.auth.dto import LoginIn, RegisterIn, SessionOut, UserPublicOut
from expense_api.services.auth.tokens import TokenClass, TokenCodec

log = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already registered"


class SessionManager(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    :param codec: Token codec; built from the app config when omitted.
    :param atomic_rotation: Use a conditional update when rotating the refresh
        hash. Defaults to ``AUTH_ATOMIC_REFRESH_ROTATION``.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec | None = None,
        atomic_rotation: bool | None = None,
    ) -> None:
        self.codec = codec or TokenCodec.from_config()
        if atomic_rotation is None:
            atomic_rotation = bool(current_app.config.get("AUTH_ATOMIC_REFRESH_ROTATION", False))
        self.atomic_rotation = atomic_rotation

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> SessionOut:
        """
        Create an account and open its first session.

        :param dto: Registration input (already validated at the boundary).
        :returns: Public user view and a fresh token pair.
        :raises ConflictError: When the email is already registered.
        """
        with self.ro_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", EMAIL_TAKEN)

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.model(name=dto.name, email=dto.email)
                user.password = dto.password  # model setter hashes
                repo.add(user)

                tokens = self.codec.mint_pair(user.id)
                user.set_refresh_token(tokens.refresh_token)
                public = self._to_public(user)
        except IntegrityError as exc:
            # a concurrent registration won the unique constraint
            if violates(exc, "uq_users_email"):
                raise ConflictError("User", EMAIL_TAKEN) from exc
            raise

        log.info(
            "auth.register.succeeded",
            extra={"event": "auth.register.succeeded", "user_id": public.id},
        )
        return SessionOut(user=public, tokens=tokens)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Authenticate credentials and replace any existing session.

        :param dto: Login input.
        :returns: Public user view and a fresh token pair.
        :raises InvalidCredentialsError: For an unknown email or a wrong
            password; the two cases are indistinguishable to the caller.
        """
        with self.ro_uow() as uow:
            user = uow.users.authenticate(dto.email, dto.password)
            public = self._to_public(user) if user is not None else None

        if public is None:
            log.info("auth.login.failed", extra={"event": "auth.login.failed"})
            raise InvalidCredentialsError()

        tokens = self.codec.mint_pair(public.id)
        with self.rw_uow() as uow:
            current = uow.users.get(public.id)
            if current is not None:
                current.set_refresh_token(tokens.refresh_token)
        if current is None:
            raise InvalidCredentialsError()

        log.info(
            "auth.login.succeeded",
            extra={"event": "auth.login.succeeded", "user_id": public.id},
        )
        return SessionOut(user=public, tokens=tokens)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_token: str | None) -> SessionOut:
        """
        Exchange a refresh token for a new pair and rotate the stored hash.

        Security
        --------
        - The presented token must verify as class ``refresh``.
        - It must match the single hash stored for its user; a validly signed
          token that no longer matches has been superseded (reuse).
        - The compare and the write run in separate units of work. Unless
          ``atomic_rotation`` is enabled, two concurrent refreshes with the
          same token can both succeed and the last write wins.

        :param refresh_token: Encoded refresh JWT from the cookie, if any.
        :returns: Public user view and the new token pair.
        :raises AuthenticationError: Missing, malformed or expired token.
        :raises ForbiddenError: Unknown user or no active session.
        :raises RefreshTokenReuseError: Token does not match the stored hash.
        """
        if not refresh_token:
            raise AuthenticationError("No refresh token")

        try:
            user_id = self.codec.verify(refresh_token, TokenClass.REFRESH)
        except AuthenticationError as exc:
            log.info(
                "auth.refresh.rejected",
                extra={"event": "auth.refresh.rejected", "reason": type(exc).__name__},
            )
            raise AuthenticationError("Invalid or expired token") from exc

        with self.ro_uow() as uow:
            user = uow.users.get_with_secrets(user_id)
            if user is None or not user.refresh_token_hash:
                log.info(
                    "auth.refresh.no_session",
                    extra={"event": "auth.refresh.no_session", "user_id": user_id},
                )
                raise ForbiddenError("Invalid refresh token")
            if not user.verify_refresh_token(refresh_token):
                self._report_reuse(user_id)
                raise RefreshTokenReuseError()
            observed_hash = user.refresh_token_hash
            public = self._to_public(user)

        tokens = self.codec.mint_pair(user_id)
        rotated = self._rotate(user_id, observed_hash, tokens.refresh_token)
        if not rotated:
            self._report_reuse(user_id)
            raise RefreshTokenReuseError()

        log.info(
            "auth.refresh.rotated",
            extra={"event": "auth.refresh.rotated", "user_id": user_id},
        )
        return SessionOut(user=public, tokens=tokens)

    def _rotate(self, user_id: int, observed_hash: str, new_refresh_token: str) -> bool:
        """Persist the hash of ``new_refresh_token``; ``False`` if the session vanished."""
        with self.rw_uow() as uow:
            if self.atomic_rotation:
                return uow.users.compare_and_set_refresh_hash(
                    user_id,
                    expected=observed_hash,
                    new_hash=hash_secret(new_refresh_token),
                )
            user = uow.users.get(user_id)
            if user is None:
                return False
            user.set_refresh_token(new_refresh_token)
            return True

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: int) -> None:
        """
        End the user's session by forgetting the stored refresh hash.

        Idempotent: logging out twice, or for a user without a session, is a
        no-op.

        :param user_id: Authenticated user id.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is not None:
                user.clear_refresh_token()
        log.info("auth.logout", extra={"event": "auth.logout", "user_id": user_id})

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    def authenticate_access(self, access_token: str | None) -> UserPublicOut:
        """
        Resolve an access token to the user it names.

        :param access_token: Encoded access JWT from the cookie, if any.
        :returns: Public user view.
        :raises AuthenticationError: Missing, invalid or expired token, or the
            user no longer exists.
        """
        if not access_token:
            raise AuthenticationError("Not authenticated")
        user_id = self.codec.verify(access_token, TokenClass.ACCESS)
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise AuthenticationError("Not authenticated")
            return self._to_public(user)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    @staticmethod
    def _to_public(user) -> UserPublicOut:
        return UserPublicOut(id=user.id, name=user.name, email=user.email)

    @staticmethod
    def _report_reuse(user_id: int) -> None:
        log.warning(
            "auth.refresh.reuse_detected",
            extra={"event": "auth.refresh.reuse_detected", "user_id": user_id},
        )
