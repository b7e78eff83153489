"""Session cookie helpers.

Both tokens travel only as ``HttpOnly`` cookies. Their ``Max-Age`` mirrors
the token lifetimes so the browser drops a cookie when its token expires.
"""

from __future__ import annotations

from flask import Response, current_app

from expense_api.services.auth.tokens import TokenClass, TokenCodec, TokenPair


def _cookie_options() -> dict[str, object]:
    config = current_app.config
    return {
        "httponly": True,
        "secure": bool(config.get("AUTH_COOKIE_SECURE", True)),
        "samesite": config.get("AUTH_COOKIE_SAMESITE", "Strict"),
        "path": "/",
    }


def _names() -> tuple[str, str]:
    config = current_app.config
    return (
        config.get("ACCESS_COOKIE_NAME", "accessToken"),
        config.get("REFRESH_COOKIE_NAME", "refreshToken"),
    )


def set_session_cookies(
    response: Response, tokens: TokenPair, codec: TokenCodec | None = None
) -> Response:
    """Attach the access and refresh cookies for ``tokens`` to ``response``."""

    codec = codec or TokenCodec.from_config()
    access_name, refresh_name = _names()
    options = _cookie_options()
    response.set_cookie(
        access_name,
        tokens.access_token,
        max_age=int(codec.lifetime(TokenClass.ACCESS).total_seconds()),
        **options,
    )
    response.set_cookie(
        refresh_name,
        tokens.refresh_token,
        max_age=int(codec.lifetime(TokenClass.REFRESH).total_seconds()),
        **options,
    )
    return response


def clear_session_cookies(response: Response) -> Response:
    """Expire both session cookies on the client."""

    options = _cookie_options()
    for name in _names():
        response.delete_cookie(
            name,
            path="/",
            secure=options["secure"],
            httponly=True,
            samesite=options["samesite"],
        )
    return response
