"""Tests for the enrichment result cache."""
from services.result_cache import ResultCache, metadata_key, summary_key


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test__cache_keys__namespaced() -> None:
    """Metadata and summary results for one URL never collide."""
    url = "https://example.com/"
    assert metadata_key(url) == "metadata:https://example.com/"
    assert summary_key(url) == "summary:https://example.com/"


def test__result_cache__hit_within_ttl() -> None:
    """A stored value is returned until the TTL elapses."""
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=300, clock=clock)
    cache.put("k", "v")

    clock.now += 299
    assert cache.get("k") == "v"


def test__result_cache__expired_entry_evicted() -> None:
    """Reading an expired entry returns None and removes it."""
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=300, clock=clock)
    cache.put("k", "v")

    clock.now += 301
    assert cache.get("k") is None
    assert len(cache) == 0


def test__result_cache__miss() -> None:
    """Unknown keys return None."""
    assert ResultCache().get("missing") is None


def test__result_cache__put_resets_age() -> None:
    """Replacing a value restarts its TTL."""
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=10, clock=clock)
    cache.put("k", "old")
    clock.now += 8
    cache.put("k", "new")
    clock.now += 8

    assert cache.get("k") == "new"


def test__result_cache__clear() -> None:
    """clear() drops every entry."""
    cache = ResultCache()
    cache.put("a", 1)
    cache.put("b", 2)
    cache.clear()
    assert len(cache) == 0
