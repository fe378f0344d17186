"""In-memory keyed cache with derived staleness for fetched storefront data."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_AGE = 5 * 60.0  # 5 minutes, in seconds


@dataclass(frozen=True)
class CacheEntry:
    """A stored value together with the clock reading taken when it was set."""

    value: Any
    timestamp: float


class KeyedCache:
    """
    Process-wide keyed store for data that callers fetched themselves.

    The cache never fetches and never expires entries on its own. Freshness is
    judged on demand by ``is_stale`` so callers can render whatever ``get``
    returns and decide separately whether to refetch.

    Values are type-erased: whatever type a caller stores under a key is what
    it gets back. Keeping one type per key is up to the caller.
    """

    def __init__(
        self,
        default_max_age: float = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self.default_max_age = default_max_age

    def get(self, key: str) -> Optional[T]:
        """Get the stored value, or None if nothing is stored under key."""
        entry = self.get_entry(key)
        if entry is None:
            return None
        return entry.value

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Get the (value, timestamp) pair for key, or None if absent."""
        with self._lock:
            return self._store.get(key)

    def set(self, key: str, value: T) -> None:
        """Store value under key with the current timestamp, replacing any prior entry."""
        entry = CacheEntry(value=value, timestamp=self._clock())
        with self._lock:
            self._store[key] = entry
        logger.debug("cache set %r", key)

    def invalidate(self, key: str) -> None:
        """Drop the entry for key. No-op if absent."""
        with self._lock:
            removed = self._store.pop(key, None)
        if removed is not None:
            logger.debug("cache invalidated %r", key)

    def invalidate_all(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.debug("cache cleared (%d entries)", count)

    def is_stale(self, key: str, max_age: Optional[float] = None) -> bool:
        """
        Check whether key should be refetched.

        Absent keys are always stale. Otherwise the entry is stale once more
        than ``max_age`` seconds have passed since it was set; an entry exactly
        ``max_age`` old is still fresh.
        """
        if max_age is None:
            max_age = self.default_max_age
        entry = self.get_entry(key)
        if entry is None:
            return True
        return self._clock() - entry.timestamp > max_age

    def age(self, key: str) -> Optional[float]:
        """Seconds since key was last set, or None if absent."""
        entry = self.get_entry(key)
        if entry is None:
            return None
        return self._clock() - entry.timestamp

    def keys(self) -> list[str]:
        """Snapshot of the keys currently stored."""
        with self._lock:
            return list(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
