"""
TTL cache for discovery results.

The only shared mutable state in the broker. Entries expire after a fixed TTL
and are never invalidated manually.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from agentbroker.types.offerings import Candidate

CacheKey = tuple[str, int]


@dataclass(frozen=True)
class DiscoveryCacheEntry:
    """Candidates for one ``(category, limit)`` key."""

    candidates: tuple[Candidate, ...]
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class DiscoveryCache:
    """Lock-guarded TTL cache keyed by ``(category, limit)``."""

    def __init__(
        self,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            ttl: Entry lifetime in seconds
            clock: Monotonic time source, injectable for tests
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, DiscoveryCacheEntry] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: CacheKey) -> list[Candidate] | None:
        """Return a fresh entry's candidates, or None on miss or expiry."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(self._clock()):
                del self._entries[key]
                return None
            return list(entry.candidates)

    async def put(self, key: CacheKey, candidates: list[Candidate]) -> None:
        async with self._lock:
            self._entries[key] = DiscoveryCacheEntry(
                candidates=tuple(candidates),
                expires_at=self._clock() + self.ttl,
            )

    def __len__(self) -> int:
        return len(self._entries)
