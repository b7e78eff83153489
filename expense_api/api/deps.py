"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from marshmallow import Schema

from expense_api.services._shared.errors import AuthenticationError
from expense_api.services.auth.dto import UserPublicOut
from expense_api.services.auth.service import SessionManager

F = TypeVar("F", bound=Callable[..., Any])

# Identity attached to ``g`` by :func:`require_auth`.
AuthenticatedUser = UserPublicOut


def load_query(schema: Schema) -> dict[str, Any]:
    """Validate ``request.args`` with ``schema`` (first value per key)."""

    return schema.load(request.args.to_dict())


def load_json(schema: Schema) -> dict[str, Any]:
    """Validate the JSON body with ``schema``; a missing body counts as ``{}``."""

    payload = request.get_json(silent=True)
    if not isinstance(payload, Mapping):
        payload = {}
    return schema.load(payload)


def require_auth(func: F) -> F:
    """Admit the request only with a valid ``access`` token cookie.

    The token is read from the cookie named by ``ACCESS_COOKIE_NAME`` and must
    verify as an access token for an existing user. There is no silent
    refresh: an expired token is a 401 and the client calls ``/auth/refresh``.
    The resolved identity is stored on ``g.current_user``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        cookie_name = current_app.config.get("ACCESS_COOKIE_NAME", "accessToken")
        token = request.cookies.get(cookie_name)
        g.pop("current_user", None)
        try:
            g.current_user = SessionManager().authenticate_access(token)
        except AuthenticationError as exc:
            current_app.logger.debug(
                "auth.gate.rejected",
                extra={"event": "auth.gate.rejected", "reason": str(exc)},
            )
            raise AuthenticationError("Not authenticated") from exc
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user() -> AuthenticatedUser:
    """Return the identity resolved by :func:`require_auth`."""

    user = g.get("current_user")
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
