"""One-way hashing helpers for passwords and refresh tokens.

Both secrets go through :mod:`werkzeug.security`, which salts every hash and
compares digests in constant time. The hash method comes from the
``PASSWORD_HASH_METHOD`` setting when an application context is active, so
tests can trade the slow default for a cheap one.
"""

from __future__ import annotations

from flask import current_app, has_app_context
from werkzeug.security import check_password_hash, generate_password_hash

DEFAULT_METHOD = "scrypt"


def _method() -> str:
    if has_app_context():
        return str(current_app.config.get("PASSWORD_HASH_METHOD", DEFAULT_METHOD))
    return DEFAULT_METHOD


def hash_secret(raw: str) -> str:
    """
    Produce a salted one-way hash of ``raw``.

    :param raw: Plain secret (password or encoded refresh token).
    :type raw: str
    :returns: Hash string embedding method, salt and digest.
    :rtype: str
    :raises ValueError: If ``raw`` is empty or not a string.
    """
    if not isinstance(raw, str) or not raw:
        raise ValueError("Secret must be a non-empty string.")
    return generate_password_hash(raw, method=_method())


def verify_secret(raw: str | None, hashed: str | None) -> bool:
    """
    Check ``raw`` against a stored hash.

    :param raw: Candidate secret.
    :param hashed: Stored hash, possibly absent.
    :returns: ``True`` only when both are present and match.
    :rtype: bool
    """
    if not raw or not hashed:
        return False
    return bool(check_password_hash(hashed, raw))
