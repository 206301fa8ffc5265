"""Short-lived in-process cache for enrichment results."""
import logging
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0  # 5 minutes


def metadata_key(url: str) -> str:
    """Cache key for metadata extraction results."""
    return f"metadata:{url}"


def summary_key(url: str) -> str:
    """Cache key for summary generation results."""
    return f"summary:{url}"


class ResultCache:
    """
    Mapping from cache key to (value, stored_at) with a fixed time-to-live.

    Expired entries are evicted when read. There is no size bound: entries only
    live for the TTL and the cache is scoped to one process, so growth is limited
    to the distinct URLs enriched within that window (plus entries never read again).

    The instance is owned by the application and passed to the pipeline explicitly.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Any | None:
        """
        Get a cached value.

        Returns:
            The value, or None on miss or when the entry has expired (expired
            entries are removed).
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("result_cache_miss key=%s", key)
            return None
        value, stored_at = entry
        if self._clock() - stored_at > self.ttl_seconds:
            del self._entries[key]
            logger.debug("result_cache_expired key=%s", key)
            return None
        logger.debug("result_cache_hit key=%s", key)
        return value

    def put(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous entry and resetting its age."""
        self._entries[key] = (value, self._clock())

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
