# comments in English; reST docstrings
"""Process-wide TTL cache used for memoizing report responses.

Two backends share the :class:`TTLCache` contract:

* :class:`InMemoryTTLCache` keeps entries in a dict guarded by a lock and
  evicts them lazily when a read finds them expired.
* :class:`RedisTTLCache` delegates expiry to Redis (``SET ... EX``) so several
  worker processes see the same entries.
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

import redis  # type: ignore[import-untyped]

DEFAULT_TTL_SECONDS = 60


class TTLCache(Protocol):
    """Key/value store whose entries expire after a per-entry TTL."""

    def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` when absent or expired."""

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""

    def delete(self, key: str) -> None:
        """Drop ``key`` if present."""

    def clear(self) -> None:
        """Drop every entry."""


@dataclass(frozen=True, slots=True)
class _Entry:
    value: Any
    expires_at: float


class InMemoryTTLCache(TTLCache):
    """
    Thread-safe, process-local TTL cache.

    :param default_ttl: TTL in seconds applied when :meth:`set` receives none.
    :param clock: Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                # lazy expiry
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        seconds = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(slots=True)
class RedisTTLCache(TTLCache):
    """
    Redis-backed TTL cache storing JSON-encoded values.

    :param r: A Redis client (already connected).
    :param prefix: Namespace prepended to every key.
    :param default_ttl: TTL in seconds applied when :meth:`set` receives none.
    """

    r: redis.Redis
    prefix: str = "cache:"
    default_ttl: int = DEFAULT_TTL_SECONDS
    _keys_pattern: str = field(init=False, default="")

    def __post_init__(self) -> None:
        self._keys_pattern = f"{self.prefix}*"

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Any | None:
        raw = self.r.get(self._k(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        seconds = self.default_ttl if ttl is None else ttl
        self.r.set(self._k(key), json.dumps(value, default=str), ex=max(1, int(seconds)))

    def delete(self, key: str) -> None:
        self.r.delete(self._k(key))

    def clear(self) -> None:
        keys = list(self.r.scan_iter(match=self._keys_pattern))
        if keys:
            self.r.delete(*keys)
