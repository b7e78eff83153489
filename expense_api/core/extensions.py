"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

from expense_api.core.cache import InMemoryTTLCache, RedisTTLCache, TTLCache

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)

CACHE_EXTENSION_KEY = "response_cache"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, rate limiting and the response cache.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`expense_api.models` package to ensure SQLAlchemy metadata is
        ready for migrations.

    Notes
    -----
    When ``REDIS_URL`` is configured the client is pinged eagerly and the
    response cache is backed by Redis; otherwise a process-local TTL cache is
    installed.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from expense_api import models as _models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        app.extensions[CACHE_EXTENSION_KEY] = InMemoryTTLCache()
        return

    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions[CACHE_EXTENSION_KEY] = RedisTTLCache(redis_client)


def get_cache() -> TTLCache:
    """Return the response cache bound to the current application."""
    cache = current_app.extensions.get(CACHE_EXTENSION_KEY)
    if cache is None:
        raise RuntimeError("Response cache is not initialized. Call init_app() first.")
    return cache
