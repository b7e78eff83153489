"""HTTP tests for the ``/api/v1/auth`` endpoints."""

from __future__ import annotations

import datetime as dt

import pytest
from expense_api.api.v1.auth import RATE_LIMITED_MESSAGE, _auth_rate_limit
from expense_api.core.config import TestingConfig
from expense_api.core.extensions import limiter
from expense_api.factory import create_app
from expense_api.services.auth.service import SessionManager
from freezegun import freeze_time
from tests.helpers.auth import API, cookie_value, login, register

ACCESS = "accessToken"
REFRESH = "refreshToken"


class TestRegister:
    def test_register_sets_cookies_and_opens_session(self, client):
        resp = register(client, name="  Ana  ", email="Ana@Example.com")

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "User registered successfully"
        assert body["user"]["name"] == "Ana"
        assert body["user"]["email"] == "ana@example.com"
        assert "password" not in body["user"]
        assert cookie_value(client, ACCESS)
        assert cookie_value(client, REFRESH)

        me = client.get(f"{API}/auth/me")
        assert me.status_code == 200
        assert me.get_json()["user"]["id"] == body["user"]["id"]

    def test_session_cookies_are_http_only(self, client):
        resp = register(client)
        headers = resp.headers.getlist("Set-Cookie")

        access = next(h for h in headers if h.startswith(f"{ACCESS}="))
        refresh = next(h for h in headers if h.startswith(f"{REFRESH}="))
        assert "HttpOnly" in access and "SameSite=Strict" in access
        assert "Max-Age=900" in access
        assert "Max-Age=604800" in refresh

    def test_duplicate_email_is_rejected(self, client):
        assert register(client).status_code == 201

        resp = register(client, email="USER@example.com")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "conflict"

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "", "email": "a@example.com", "password": "secret1"},
            {"name": "A", "email": "not-an-email", "password": "secret1"},
            {"name": "A", "email": "a@example.com", "password": "short"},
            {"email": "a@example.com", "password": "secret1"},
        ],
    )
    def test_invalid_payload_is_a_validation_error(self, client, payload):
        resp = client.post(f"{API}/auth/register", json=payload)

        assert resp.status_code == 400
        problem = resp.get_json()
        assert problem["code"] == "validation_error"
        assert problem["details"]["errors"]
        assert resp.mimetype == "application/problem+json"

    def test_missing_body_is_a_validation_error(self, client):
        resp = client.post(f"{API}/auth/register")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "validation_error"


class TestLogin:
    def test_login_returns_user_and_new_cookies(self, client):
        register(client)
        old_refresh = cookie_value(client, REFRESH)
        client.delete_cookie(ACCESS)

        resp = login(client)

        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Login successful"
        assert cookie_value(client, ACCESS)
        assert cookie_value(client, REFRESH) != old_refresh

    @pytest.mark.parametrize(
        ("email", "password"),
        [("user@example.com", "wrong-pass"), ("nobody@example.com", "secret1")],
    )
    def test_bad_credentials_share_one_message(self, client, email, password):
        register(client)

        resp = login(client, email=email, password=password)

        assert resp.status_code == 400
        problem = resp.get_json()
        assert problem["code"] == "invalid_credentials"
        assert problem["detail"] == "Invalid credentials"


class TestRefresh:
    def test_refresh_rotates_both_cookies(self, client):
        with freeze_time("2024-05-01 12:00:00") as frozen:
            register(client)
            access, refresh = cookie_value(client, ACCESS), cookie_value(client, REFRESH)
            frozen.tick(dt.timedelta(seconds=2))

            resp = client.post(f"{API}/auth/refresh")

            assert resp.status_code == 200
            assert resp.get_json() == {"message": "Token refreshed"}
            assert cookie_value(client, ACCESS) != access
            assert cookie_value(client, REFRESH) != refresh

    def test_replayed_refresh_token_is_forbidden(self, client):
        with freeze_time("2024-05-01 12:00:00") as frozen:
            register(client)
            stale = cookie_value(client, REFRESH)
            frozen.tick(dt.timedelta(seconds=2))
            assert client.post(f"{API}/auth/refresh").status_code == 200

            client.set_cookie(REFRESH, stale)
            resp = client.post(f"{API}/auth/refresh")

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "forbidden"

    def test_missing_refresh_cookie_is_unauthorized(self, client):
        resp = client.post(f"{API}/auth/refresh")
        assert resp.status_code == 401

    def test_access_token_cannot_refresh(self, client):
        register(client)
        client.set_cookie(REFRESH, cookie_value(client, ACCESS))

        resp = client.post(f"{API}/auth/refresh")
        assert resp.status_code == 401

    def test_expired_access_token_recovers_through_refresh(self, client):
        with freeze_time("2024-05-01 12:00:00") as frozen:
            register(client)
            assert client.get(f"{API}/auth/me").status_code == 200

            frozen.tick(dt.timedelta(minutes=16))
            assert client.get(f"{API}/auth/me").status_code == 401

            assert client.post(f"{API}/auth/refresh").status_code == 200
            assert client.get(f"{API}/auth/me").status_code == 200


class TestLogoutAndGate:
    def test_logout_clears_cookies_and_revokes_refresh(self, client):
        register(client)
        refresh = cookie_value(client, REFRESH)

        resp = client.post(f"{API}/auth/logout")

        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Logged out successfully"}
        assert cookie_value(client, ACCESS) is None
        assert cookie_value(client, REFRESH) is None

        client.set_cookie(REFRESH, refresh)
        assert client.post(f"{API}/auth/refresh").status_code == 403

    def test_logout_requires_authentication(self, client):
        assert client.post(f"{API}/auth/logout").status_code == 401

    def test_me_without_cookie_is_unauthorized(self, client):
        resp = client.get(f"{API}/auth/me")

        assert resp.status_code == 401
        assert resp.get_json()["detail"] == "Not authenticated"

    def test_garbage_access_cookie_is_unauthorized(self, client):
        client.set_cookie(ACCESS, "not-a-jwt")
        assert client.get(f"{API}/auth/me").status_code == 401

    def test_refresh_token_is_not_accepted_by_the_gate(self, client):
        register(client)
        client.set_cookie(ACCESS, cookie_value(client, REFRESH))
        assert client.get(f"{API}/auth/me").status_code == 401


def test_auth_rate_limit_reads_config(app, monkeypatch):
    monkeypatch.setitem(app.config, "AUTH_RATE_LIMIT", "3 per minute")
    with app.app_context():
        assert _auth_rate_limit() == "3 per minute"


class RateLimitedConfig(TestingConfig):
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = "memory://"
    AUTH_RATE_LIMIT = "10 per 15 minutes"


@pytest.fixture()
def limited_client(session, monkeypatch):
    """Client for an app with the auth rate limit switched on.

    The limiter is a module-level singleton, so its ``enabled`` flag is
    restored afterwards and the shared test app stays unlimited.
    """
    monkeypatch.setattr(limiter, "enabled", limiter.enabled)
    app = create_app(RateLimitedConfig, instance_relative_config=False)
    yield app.test_client()
    limiter.reset()


def test_auth_endpoints_share_one_rate_limit(limited_client, monkeypatch):
    calls = []
    original_login = SessionManager.login

    def _counting_login(self, dto):
        calls.append(dto.email)
        return original_login(self, dto)

    monkeypatch.setattr(SessionManager, "login", _counting_login)

    codes = [login(limited_client, email="nobody@example.com").status_code for _ in range(6)]
    codes += [limited_client.post(f"{API}/auth/refresh").status_code for _ in range(4)]
    assert codes == [400] * 6 + [401] * 4

    blocked_login = login(limited_client, email="nobody@example.com")
    blocked_refresh = limited_client.post(f"{API}/auth/refresh")

    for resp in (blocked_login, blocked_refresh):
        assert resp.status_code == 429
        assert resp.mimetype == "application/problem+json"
        problem = resp.get_json()
        assert problem["code"] == "too_many_requests"
        assert problem["detail"] == RATE_LIMITED_MESSAGE
    assert len(calls) == 6
