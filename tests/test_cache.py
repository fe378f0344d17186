"""
Behaviour of the keyed cache: storage, invalidation and staleness.

Run with: pytest tests/test_cache.py -v
"""

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cache import DEFAULT_MAX_AGE, CacheEntry, KeyedCache

# --- Fixtures ---


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return KeyedCache(clock=clock)


# --- Storage ---


class TestGetSet:
    def test_never_set_key_is_absent_and_stale(self, cache):
        assert cache.get("products:page1") is None
        assert cache.get_entry("products:page1") is None
        assert cache.is_stale("products:page1")
        assert cache.is_stale("products:page1", max_age=10**9)

    def test_set_then_get(self, cache):
        cache.set("products:page1", ["A", "B"])
        assert cache.get("products:page1") == ["A", "B"]
        assert not cache.is_stale("products:page1", max_age=0.001)

    def test_set_replaces_value_and_timestamp(self, cache, clock):
        cache.set("k", {"v": 1})
        clock.advance(200)
        cache.set("k", {"w": 2})

        assert cache.get("k") == {"w": 2}
        assert cache.get_entry("k") == CacheEntry(value={"w": 2}, timestamp=1200.0)

        clock.advance(200)
        # 200s since the second set, 400s since the first
        assert not cache.is_stale("k", max_age=300)

    def test_value_type_may_change_under_a_key(self, cache):
        cache.set("k", [1, 2])
        cache.set("k", "now a string")
        assert cache.get("k") == "now a string"

    def test_stored_none_is_distinguishable_through_entry(self, cache):
        cache.set("k", None)
        assert cache.get("k") is None
        assert cache.get_entry("k") is not None
        assert "k" in cache

    def test_empty_key_is_an_ordinary_key(self, cache):
        cache.set("", 42)
        assert cache.get("") == 42
        cache.invalidate("")
        assert cache.get("") is None


# --- Invalidation ---


class TestInvalidate:
    def test_invalidate_makes_key_absent_and_stale(self, cache):
        cache.set("cart:summary", {"total": 10})
        cache.invalidate("cart:summary")

        assert cache.get("cart:summary") is None
        assert cache.is_stale("cart:summary", max_age=10**9)

    def test_invalidate_is_idempotent(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        cache.invalidate("a")

        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert len(cache) == 1

    def test_invalidate_unknown_key_is_noop(self, cache):
        cache.invalidate("cart:summary")
        assert len(cache) == 0

    def test_invalidate_all(self, cache):
        for i in range(5):
            cache.set(f"key-{i}", i)
        cache.invalidate_all()
        cache.invalidate_all()

        assert len(cache) == 0
        assert all(cache.get(f"key-{i}") is None for i in range(5))
        assert cache.keys() == []

    def test_key_can_cycle(self, cache):
        for value in range(3):
            cache.set("k", value)
            assert cache.get("k") == value
            cache.invalidate("k")
            assert "k" not in cache


# --- Staleness ---


class TestStaleness:
    def test_default_max_age_is_five_minutes(self):
        assert DEFAULT_MAX_AGE == 300.0

    def test_boundary(self, cache, clock):
        cache.set("k", "v")
        clock.advance(300)
        assert not cache.is_stale("k", max_age=300)
        clock.advance(0.001)
        assert cache.is_stale("k", max_age=300)

    def test_uses_default_when_no_override(self, clock):
        cache = KeyedCache(default_max_age=60, clock=clock)
        cache.set("k", "v")
        clock.advance(61)
        assert cache.is_stale("k")
        assert not cache.is_stale("k", max_age=120)

    def test_staleness_does_not_evict(self, cache, clock):
        cache.set("k", "v")
        clock.advance(10_000)
        assert cache.is_stale("k")
        assert cache.get("k") == "v"

    def test_age(self, cache, clock):
        assert cache.age("k") is None
        cache.set("k", "v")
        clock.advance(42)
        assert cache.age("k") == 42

    def test_refetch_scenario(self, cache, clock):
        cache.set("products:page1", ["A", "B"])
        assert cache.get("products:page1") == ["A", "B"]
        assert not cache.is_stale("products:page1", 300)

        clock.advance(300.001)
        assert cache.is_stale("products:page1", 300)

        # The caller refetched
        cache.set("products:page1", ["A", "B", "C"])
        assert cache.get("products:page1") == ["A", "B", "C"]
        assert not cache.is_stale("products:page1", 300)


# --- Concurrency ---


class TestConcurrency:
    def test_concurrent_sets_never_tear(self):
        """Each writer stamps with its own time, so value and timestamp must agree."""
        local = threading.local()
        cache = KeyedCache(clock=lambda: local.now)
        start = threading.Barrier(8)
        torn = []

        def writer(n: int):
            local.now = float(n)
            start.wait()
            for _ in range(500):
                cache.set("x", n)
                entry = cache.get_entry("x")
                if entry.timestamp != float(entry.value):
                    torn.append(entry)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        entry = cache.get_entry("x")
        assert entry.value in range(8)
        assert entry.timestamp == float(entry.value)
        assert torn == []

    def test_two_writers_one_winner(self, cache):
        threads = [threading.Thread(target=cache.set, args=("x", v)) for v in (1, 2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert cache.get("x") in (1, 2)
