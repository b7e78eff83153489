"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from expense_api.api.cookies import clear_session_cookies, set_session_cookies
from expense_api.api.deps import current_user, json_response, load_json, require_auth, timing
from expense_api.core.extensions import limiter
from expense_api.schemas import LoginSchema, RegisterSchema, UserSchema
from expense_api.services.auth.dto import LoginIn, RegisterIn
from expense_api.services.auth.service import SessionManager

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
user_schema = UserSchema()

RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."


def _auth_rate_limit() -> str:
    return str(current_app.config.get("AUTH_RATE_LIMIT", "10 per 15 minutes"))


auth_limit = limiter.shared_limit(
    _auth_rate_limit, scope="auth", error_message=RATE_LIMITED_MESSAGE
)


@bp.post("/register")
@auth_limit
@timing
def register():
    """Create an account and open its first session."""

    data = load_json(register_schema)
    service = SessionManager()
    session = service.register(RegisterIn(**data))
    body = {"message": "User registered successfully", "user": user_schema.dump(session.user)}
    response = json_response(body, status=201)
    return set_session_cookies(response, session.tokens, service.codec)


@bp.post("/login")
@auth_limit
@timing
def login():
    """Authenticate credentials and replace the session cookies."""

    data = load_json(login_schema)
    service = SessionManager()
    session = service.login(LoginIn(**data))
    body = {"message": "Login successful", "user": user_schema.dump(session.user)}
    response = clear_session_cookies(json_response(body))
    return set_session_cookies(response, session.tokens, service.codec)


@bp.post("/refresh")
@auth_limit
@timing
def refresh():
    """Rotate the session using the refresh cookie."""

    cookie_name = current_app.config.get("REFRESH_COOKIE_NAME", "refreshToken")
    service = SessionManager()
    session = service.refresh(request.cookies.get(cookie_name))
    response = json_response({"message": "Token refreshed"})
    return set_session_cookies(response, session.tokens, service.codec)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Forget the stored refresh token and expire both cookies."""

    SessionManager().logout(current_user().id)
    response = json_response({"message": "Logged out successfully"})
    return clear_session_cookies(response)


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user's public profile."""

    return json_response({"user": user_schema.dump(current_user())})
