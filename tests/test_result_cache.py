"""Tests for the in-memory analysis cache."""

from __future__ import annotations

import hashlib

from config import Settings
from src.filescope.result_cache import ResultCache


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _cache(**overrides) -> tuple[ResultCache, _Clock]:
    clock = _Clock()
    return ResultCache(Settings(**overrides), clock=clock), clock


def test_make_key_uses_prefix_and_sha256():
    key = ResultCache.make_key(b"content", "regex")
    assert key == "regex:" + hashlib.sha256(b"content").hexdigest()


def test_get_returns_stored_value_until_expiry():
    cache, clock = _cache(cache_ttl_seconds=60)
    cache.set("k", {"value": 1})

    assert cache.get("k") == {"value": 1}
    clock.now += 61
    assert cache.get("k") is None
    assert cache.stats()["total"] == 0


def test_stats_counts_active_and_expired():
    cache, clock = _cache()
    cache.set("short", 1, ttl=10)
    cache.set("long", 2, ttl=100)
    clock.now += 50

    assert cache.stats() == {"total": 2, "active": 1, "expired": 1}


def test_sweep_runs_when_cache_grows_past_limit():
    cache, clock = _cache(cache_max_entries=2)
    cache.set("a", 1, ttl=1)
    cache.set("b", 2, ttl=1)
    clock.now += 5
    cache.set("c", 3)

    assert cache.stats() == {"total": 1, "active": 1, "expired": 0}


def test_delete_and_clear():
    cache, _ = _cache()
    cache.set("a", 1)
    cache.set("b", 2)

    cache.delete("a")
    assert cache.get("a") is None
    cache.clear()
    assert cache.stats()["total"] == 0


def test_live_entries_are_evicted_oldest_first_beyond_limit():
    cache, _ = _cache(cache_max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.stats()["total"] == 2
    assert cache.get("a") is None
    assert (cache.get("b"), cache.get("c")) == (2, 3)


def test_resetting_a_key_refreshes_its_position():
    cache, _ = _cache(cache_max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)

    assert cache.get("b") is None
    assert cache.get("a") == 10
