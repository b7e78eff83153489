"""Unit tests for the TTL cache backends."""

from __future__ import annotations

import threading

import fakeredis
import pytest
from expense_api.core.cache import InMemoryTTLCache, RedisTTLCache


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestInMemoryTTLCache:
    def test_returns_value_before_expiry(self):
        clock = FakeClock()
        cache = InMemoryTTLCache(default_ttl=10, clock=clock)
        cache.set("k", {"a": 1})
        clock.now = 9.9
        assert cache.get("k") == {"a": 1}

    def test_expires_lazily_on_read(self):
        clock = FakeClock()
        cache = InMemoryTTLCache(default_ttl=10, clock=clock)
        cache.set("k", "v")
        clock.now = 10
        assert len(cache) == 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_per_entry_ttl_overrides_default(self):
        clock = FakeClock()
        cache = InMemoryTTLCache(default_ttl=100, clock=clock)
        cache.set("short", 1, ttl=1)
        cache.set("long", 2)
        clock.now = 5
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_delete_and_clear(self):
        cache = InMemoryTTLCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        cache.delete("missing")
        assert cache.get("a") is None
        cache.clear()
        assert len(cache) == 0

    def test_concurrent_writers(self):
        cache = InMemoryTTLCache(default_ttl=60)

        def _writer(offset: int) -> None:
            for i in range(200):
                cache.set(f"{offset}:{i}", i)

        threads = [threading.Thread(target=_writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 800


class TestRedisTTLCache:
    @pytest.fixture()
    def redis_client(self):
        return fakeredis.FakeRedis()

    def test_round_trips_json_with_ttl(self, redis_client):
        cache = RedisTTLCache(redis_client, prefix="t:", default_ttl=30)
        cache.set("yearly:1:2024", [{"month": 1, "total": 2.5}])
        assert cache.get("yearly:1:2024") == [{"month": 1, "total": 2.5}]
        assert 0 < redis_client.ttl("t:yearly:1:2024") <= 30

    def test_missing_key_is_none(self, redis_client):
        assert RedisTTLCache(redis_client).get("nope") is None

    def test_clear_only_touches_its_prefix(self, redis_client):
        redis_client.set("other", "keep")
        cache = RedisTTLCache(redis_client, prefix="t:")
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        assert cache.get("a") is None
        cache.clear()
        assert cache.get("b") is None
        assert redis_client.get("other") == b"keep"
