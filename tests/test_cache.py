"""Tests for the result cache."""

from food_search.services.cache import ResultCache
from tests.conftest import ManualClock


def test_cache_returns_value_within_ttl(clock: ManualClock) -> None:
    cache = ResultCache(ttl_seconds=600, clock=clock.as_datetime)
    cache.set("search:rice", ["rice"])

    clock.advance(599)

    assert cache.get("search:rice") == ["rice"]


def test_cache_expires_after_ttl(clock: ManualClock) -> None:
    cache = ResultCache(ttl_seconds=600, clock=clock.as_datetime)
    cache.set("search:rice", ["rice"])

    clock.advance(600)

    assert cache.get("search:rice") is None
    assert len(cache) == 0


def test_cache_ttl_override(clock: ManualClock) -> None:
    cache = ResultCache(ttl_seconds=600, clock=clock.as_datetime)
    cache.set("fdc:food:1", "food", ttl_seconds=86400)

    clock.advance(3600)

    assert cache.get("fdc:food:1") == "food"


def test_cache_evicts_least_recently_used(clock: ManualClock) -> None:
    cache = ResultCache(max_entries=2, clock=clock.as_datetime)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")

    cache.set("c", 3)

    assert cache.get("a") == 1
    assert cache.get("b") is None
    assert cache.get("c") == 3


def test_cache_clear() -> None:
    cache = ResultCache()
    cache.set("a", 1)

    cache.clear()

    assert cache.get("a") is None
