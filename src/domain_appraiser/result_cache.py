"""
Content-addressed result cache.

Appraisals are keyed by (normalized domain, options fingerprint). An entry
is served while it is younger than the freshness window; entries recorded
without a fingerprint are legacy entries and match any options.
"""

import time
from dataclasses import dataclass, replace
from typing import AsyncContextManager, Callable, Optional

from .kv_store import KeyValueStore
from .models import Appraisal, CacheEntry, WhoisSnapshot


LEGACY_HASH = "legacy"
HITS_KEY = "cache-stats:hits"
MISSES_KEY = "cache-stats:misses"


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int


def cache_key(domain: str, options_hash: Optional[str]) -> str:
    return f"appraisal:{domain}:{options_hash or LEGACY_HASH}"


class ResultCache:
    """Deduplicates identical evaluations within the freshness window."""

    def __init__(
        self,
        store: KeyValueStore,
        freshness_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._freshness = freshness_seconds
        self._clock = clock

    @property
    def freshness_seconds(self) -> float:
        return self._freshness

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.created_at < self._freshness

    async def get(self, domain: str, options_hash: Optional[str]) -> Optional[CacheEntry]:
        """
        Return the freshest usable entry, or None.

        Both the exact fingerprint and the legacy slot are consulted.
        """
        keys = [cache_key(domain, options_hash)]
        if options_hash is not None:
            keys.append(cache_key(domain, None))

        best: Optional[CacheEntry] = None
        for key in keys:
            entry = await self._store.get(key)
            if entry is None or not self.is_fresh(entry):
                continue
            if best is None or entry.created_at > best.created_at:
                best = entry

        await self._store.increment(HITS_KEY if best else MISSES_KEY)
        return best

    async def put(self, appraisal: Appraisal, created_at: Optional[float] = None) -> CacheEntry:
        entry = CacheEntry(
            domain=appraisal.domain,
            options_hash=appraisal.options_hash,
            appraisal=appraisal,
            created_at=self._clock() if created_at is None else created_at,
        )
        await self._store.put(
            cache_key(entry.domain, entry.options_hash), entry, ttl_seconds=self._freshness
        )
        return entry

    async def patch_whois(
        self, domain: str, options_hash: Optional[str], snapshot: WhoisSnapshot
    ) -> bool:
        """
        Attach WHOIS data to a cached appraisal.

        Returns:
            True when an entry changed; False when it is missing or already patched
        """
        key = cache_key(domain, options_hash)
        async with self._store.lock(key):
            entry = await self._store.get(key)
            if entry is None or entry.appraisal.whois == snapshot:
                return False
            patched = replace(entry, appraisal=entry.appraisal.with_whois(snapshot))
            remaining = self._freshness - (self._clock() - entry.created_at)
            await self._store.put(key, patched, ttl_seconds=max(remaining, 0.0))
            return True

    async def invalidate(self, domain: str, options_hash: Optional[str]) -> bool:
        return await self._store.delete(cache_key(domain, options_hash))

    def lock(self, domain: str, options_hash: Optional[str]) -> AsyncContextManager[None]:
        """Single-flight lock for one fingerprint."""
        return self._store.lock(f"flight:{cache_key(domain, options_hash)}")

    async def stats(self) -> CacheStats:
        return CacheStats(
            hits=int(await self._store.get(HITS_KEY) or 0),
            misses=int(await self._store.get(MISSES_KEY) or 0),
        )
