"""In-process result cache with per-entry expiry.

Invariants:
- An entry is never returned at or past its `expires_at`.
- A `set` on an existing key replaces it (last write wins).
- `None` is not storable; `get` uses it to signal a miss.
- At most `max_entries` live at once; expired entries are dropped before
  live ones are evicted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger("moviefinder.services.cache")


def normalize_query(text: str) -> str:
    return " ".join(text.lower().split())


def make_key(namespace: str, *parts: Any) -> str:
    """Build a deterministic key such as `search:the prestige`."""
    tokens = [normalize_query(str(part)) if part is not None else "" for part in parts]
    return ":".join([namespace, *tokens])


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    value: Any
    expires_at: float


class ResultCache:
    """Bounded in-memory cache; least recently used entries go first when full."""

    def __init__(self, *, max_entries: int = 4096, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._max_entries = max(1, int(max_entries))
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if value is None:
            raise ValueError("ResultCache cannot store None")
        if ttl_seconds <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl_seconds)
        self._entries.move_to_end(key)
        if len(self._entries) > self._max_entries:
            self.sweep()
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted %s to stay within %d cache entries", evicted, self._max_entries)

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Sweep forever at a fixed interval; cancel the task to stop."""
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.info("Swept %d expired cache entries (%d live)", removed, len(self))
