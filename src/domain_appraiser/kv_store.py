"""
Shared key-value store abstraction.

The result cache and the rate limiter keep their state behind this interface
so that tests can substitute an in-memory store with a controllable clock
and production can back it with any concurrent key-value service. Mutations
of one key are serialized with a per-key lock; unrelated keys never contend.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator, Callable, Optional, Protocol


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Any]: ...

    async def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None: ...

    async def increment(self, key: str, amount: int = 1, ttl_seconds: Optional[float] = None) -> int: ...

    async def delete(self, key: str) -> bool: ...

    def lock(self, key: str) -> AsyncContextManager[None]: ...


class _KeyLock:
    """A lock plus the number of tasks holding or waiting for it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class InMemoryStore:
    """
    Process-local KeyValueStore.

    Entries carry an optional expiry time. They are dropped when read after
    they expire, and writes sweep all expired entries at most once per
    sweep interval. A key's lock exists only while some task holds or
    waits for it.
    """

    SWEEP_INTERVAL_SECONDS = 60.0

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, tuple[Any, Optional[float]]] = {}
        self._locks: dict[str, _KeyLock] = {}
        self._next_sweep = clock() + self.SWEEP_INTERVAL_SECONDS

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    @property
    def entry_count(self) -> int:
        """Entries held, including expired ones not yet swept."""
        return len(self._data)

    def _live(self, key: str) -> Optional[tuple[Any, Optional[float]]]:
        item = self._data.get(key)
        if item is None:
            return None
        _, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return item

    def _expiry(self, ttl_seconds: Optional[float]) -> Optional[float]:
        return None if ttl_seconds is None else self._clock() + ttl_seconds

    def _maybe_sweep(self) -> None:
        now = self._clock()
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.SWEEP_INTERVAL_SECONDS
        expired = [
            key for key, (_, expires_at) in self._data.items()
            if expires_at is not None and now >= expires_at
        ]
        for key in expired:
            del self._data[key]

    async def get(self, key: str) -> Optional[Any]:
        item = self._live(key)
        return None if item is None else item[0]

    async def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        self._maybe_sweep()
        self._data[key] = (value, self._expiry(ttl_seconds))

    async def increment(self, key: str, amount: int = 1, ttl_seconds: Optional[float] = None) -> int:
        """Add to an integer counter, creating it (with the ttl) when absent."""
        self._maybe_sweep()
        item = self._live(key)
        if item is None:
            value = amount
            expires_at = self._expiry(ttl_seconds)
        else:
            value = int(item[0]) + amount
            expires_at = item[1]
        self._data[key] = (value, expires_at)
        return value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _KeyLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    def keys(self, prefix: str = "") -> list[str]:
        return [k for k in list(self._data) if k.startswith(prefix) and self._live(k) is not None]

    def __len__(self) -> int:
        return len(self.keys())
