# expense_api/services/auth/tokens.py
"""
Token codec: mint and verify the two classes of signed session tokens.

Access and refresh tokens are HS256 JWTs signed with *different* secrets and
carrying a ``type`` marker, so a token of one class can never be accepted as
the other even if the marker were forged. Verification is pure: no database
access, no side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

import jwt
from flask import current_app

from expense_api.services._shared.errors import TokenExpiredError, TokenInvalidError


class TokenClass(str, Enum):
    """Token class marker embedded as the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Secret and lifetime for one token class.

    :param secret: HMAC signing key.
    :type secret: str
    :param expires: Lifetime added to the issue time.
    :type expires: timedelta
    """

    secret: str
    expires: timedelta


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Freshly minted access/refresh tokens for one user.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


class TokenCodec:
    """
    Mint and verify session tokens.

    :param access: Settings for :attr:`TokenClass.ACCESS`.
    :param refresh: Settings for :attr:`TokenClass.REFRESH`.
    :param algorithm: JWS algorithm; both classes use the same one.
    """

    def __init__(
        self,
        *,
        access: TokenSettings,
        refresh: TokenSettings,
        algorithm: str = "HS256",
    ) -> None:
        if access.secret == refresh.secret:
            raise ValueError("Access and refresh tokens must use distinct secrets.")
        self._settings = {TokenClass.ACCESS: access, TokenClass.REFRESH: refresh}
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config: Any | None = None) -> TokenCodec:
        """Build a codec from Flask config (defaults to ``current_app.config``)."""
        cfg = config if config is not None else current_app.config
        return cls(
            access=TokenSettings(
                secret=cfg["JWT_ACCESS_SECRET"],
                expires=cfg.get("JWT_ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            ),
            refresh=TokenSettings(
                secret=cfg["JWT_REFRESH_SECRET"],
                expires=cfg.get("JWT_REFRESH_TOKEN_EXPIRES", timedelta(days=7)),
            ),
            algorithm=cfg.get("JWT_ALGORITHM", "HS256"),
        )

    def lifetime(self, token_class: TokenClass) -> timedelta:
        """Return the configured lifetime of ``token_class``."""
        return self._settings[token_class].expires

    # ------------------------------------------------------------------ #
    # Mint
    # ------------------------------------------------------------------ #

    def mint(self, user_id: int, token_class: TokenClass) -> str:
        """
        Produce a signed token identifying ``user_id``.

        :param user_id: Subject of the token.
        :param token_class: Access or refresh.
        :returns: Encoded JWT.
        :rtype: str
        """
        settings = self._settings[token_class]
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": token_class.value,
            "iat": now,
            "exp": now + settings.expires,
            # two tokens minted in the same second must still differ
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, settings.secret, algorithm=self.algorithm)

    def mint_pair(self, user_id: int) -> TokenPair:
        """Mint an access token and a refresh token for ``user_id``."""
        return TokenPair(
            access_token=self.mint(user_id, TokenClass.ACCESS),
            refresh_token=self.mint(user_id, TokenClass.REFRESH),
        )

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify(self, token: str, token_class: TokenClass) -> int:
        """
        Check signature, expiry and class marker; return the user id.

        :param token: Encoded JWT.
        :param token_class: Class the caller expects.
        :returns: The ``sub`` claim as an integer.
        :rtype: int
        :raises TokenExpiredError: When the embedded expiry has passed.
        :raises TokenInvalidError: On bad signature, wrong class, or malformed
            payload.
        """
        settings = self._settings[token_class]
        try:
            claims = jwt.decode(
                token,
                settings.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc

        if claims.get("type") != token_class.value:
            raise TokenInvalidError("Wrong token class")
        return self._coerce_user_id(claims.get("sub"))

    @staticmethod
    def _coerce_user_id(subject: Any) -> int:
        """Ensure the JWT subject can be treated as an integer user id."""
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise TokenInvalidError("Invalid token subject")
