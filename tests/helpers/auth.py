"""Authentication helpers for HTTP-level tests."""

from __future__ import annotations

API = "/api/v1"


def register(client, *, name="Test User", email="user@example.com", password="secret1"):
    """Register through the API; the client keeps the session cookies.

    Returns
    -------
    werkzeug.test.TestResponse
        Response of ``POST /auth/register``.
    """
    return client.post(
        f"{API}/auth/register", json={"name": name, "email": email, "password": password}
    )


def login(client, *, email="user@example.com", password="secret1"):
    """Log in through the API; the client keeps the session cookies."""
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


def cookie_value(client, name: str) -> str | None:
    """Return the value of cookie ``name`` held by the test client, if any."""
    cookie = client.get_cookie(name)
    return cookie.value if cookie is not None else None
