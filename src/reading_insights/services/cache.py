"""In-process TTL cache for upstream catalog responses."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    key: str
    value: T
    fetched_at: float


class TTLCache(Generic[T]):
    """A dict of immutable :class:`CacheEntry` values with lazy expiry.

    An entry is valid while ``clock() - fetched_at < ttl_seconds``. Expired
    entries are dropped when read or by :meth:`sweep`. Writes always replace
    a whole entry, so concurrent writers to one key simply race and the last
    write wins.

    Args:
        ttl_seconds: Lifetime of an entry.
        max_entries: Upper bound on stored entries; the oldest entry is
            evicted first once the bound is reached. ``None`` means unbounded.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.fetched_at < self.ttl_seconds

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry, self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T) -> CacheEntry[T]:
        entry = CacheEntry(key=key, value=value, fetched_at=self._clock())
        self._entries.pop(key, None)
        if self.max_entries is not None:
            while self._entries and len(self._entries) >= self.max_entries:
                # dicts keep insertion order, so the first key is the oldest write
                oldest = next(iter(self._entries))
                del self._entries[oldest]
        self._entries[key] = entry
        return entry

    def sweep(self) -> int:
        """Remove every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if not self._is_fresh(e, now)]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
