"""In-process, time-bounded cache of served storage responses."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A served body and the headers it was served with.

    Entries are never mutated; a later read of the same path replaces the
    whole entry.
    """

    body: bytes
    headers: Mapping[str, str]
    created_at: float = field(default_factory=time.monotonic)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def age(self, now: float) -> float:
        return now - self.created_at


class ResponseCache:
    """Per-path response cache with TTL expiry.

    Stale entries are dropped lazily on lookup and by :meth:`sweep`, which a
    background task calls every ``sweep_interval`` seconds. :meth:`maybe_sweep`
    additionally sweeps on a random fraction of requests. There is no size
    cap: entries are small and the TTL is short.
    """

    def __init__(
        self,
        ttl: float = 10.0,
        sweep_interval: float = 10.0,
        sweep_probability: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self.sweep_probability = sweep_probability
        self._clock = clock
        self._rng = rng or random.Random()
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def now(self) -> float:
        return self._clock()

    def is_fresh(self, entry: CacheEntry, now: float | None = None) -> bool:
        if now is None:
            now = self._clock()
        return entry.age(now) < self.ttl

    def lookup(self, key: str) -> CacheEntry | None:
        """Return the fresh entry for *key*, dropping it if it has expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self.is_fresh(entry, now):
                del self._entries[key]
                return None
            return entry

    def store(self, key: str, entry: CacheEntry) -> None:
        """Store *entry* under *key*, replacing any previous entry."""
        with self._lock:
            self._entries[key] = entry

    def sweep(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            stale_keys = [key for key, entry in self._entries.items() if not self.is_fresh(entry, now)]
            for key in stale_keys:
                del self._entries[key]
        if stale_keys:
            logger.debug("Swept %d expired storage cache entries", len(stale_keys))
        return len(stale_keys)

    def maybe_sweep(self) -> int:
        """Sweep on a random fraction of calls."""
        if self.sweep_probability and self._rng.random() < self.sweep_probability:
            return self.sweep()
        return 0

    # -- background sweeper --

    async def _run_sweeper(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    async def start(self) -> None:
        """Start the periodic sweep task on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._run_sweeper())

    async def stop(self) -> None:
        """Cancel the periodic sweep task."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None
