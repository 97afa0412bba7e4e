"""
Property-based tests for the key-value store and the result cache.

Uses a controllable clock so freshness windows and expiry can be checked
without sleeping.
"""

import asyncio
from typing import Optional

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_appraiser.enums import LegalFlag
from domain_appraiser.kv_store import InMemoryStore
from domain_appraiser.models import Appraisal, PriceEstimate, WhoisSnapshot
from domain_appraiser.result_cache import ResultCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_appraisal(domain: str = "zap.com", options_hash: Optional[str] = "abc123") -> Appraisal:
    return Appraisal(
        domain=domain,
        final_score=55.0,
        bracket="40-60",
        price_estimate=PriceEstimate(300, 650, "Score-based estimate", 300, 1_000),
        breakdown=(),
        legal_flag=LegalFlag.CLEAR,
        commentary="",
        comparables=(),
        created_at="2024-06-01T00:00:00+00:00",
        options_hash=options_hash,
    )


class TestInMemoryStoreProperty:
    """Entries expire lazily and counters accumulate."""

    @given(
        ttl=st.integers(min_value=1, max_value=10_000),
        elapsed=st.integers(min_value=0, max_value=20_000),
    )
    @settings(max_examples=100)
    def test_entries_visible_only_before_expiry(self, ttl: int, elapsed: int) -> None:
        """*For any* ttl, an entry SHALL be readable before it expires and gone after."""
        clock = FakeClock()
        store = InMemoryStore(clock=clock)

        async def scenario():
            await store.put("k", "v", ttl_seconds=ttl)
            clock.advance(elapsed)
            return await store.get("k")

        value = asyncio.run(scenario())

        if elapsed < ttl:
            assert value == "v"
        else:
            assert value is None

    @given(amounts=st.lists(st.integers(min_value=1, max_value=10), min_size=1, max_size=20))
    @settings(max_examples=50)
    def test_increment_accumulates(self, amounts: list[int]) -> None:
        """*For any* sequence of increments, the counter SHALL equal their sum."""
        store = InMemoryStore()

        async def scenario():
            value = 0
            for amount in amounts:
                value = await store.increment("counter", amount)
            return value

        assert asyncio.run(scenario()) == sum(amounts)

    def test_increment_keeps_original_expiry(self) -> None:
        clock = FakeClock()
        store = InMemoryStore(clock=clock)

        async def scenario():
            await store.increment("counter", ttl_seconds=10)
            clock.advance(6)
            await store.increment("counter", ttl_seconds=10)
            clock.advance(5)
            return await store.get("counter")

        assert asyncio.run(scenario()) is None

    def test_delete_and_keys(self) -> None:
        store = InMemoryStore()

        async def scenario():
            await store.put("a:1", 1)
            await store.put("a:2", 2)
            await store.put("b:1", 3)
            deleted = await store.delete("a:1")
            missing = await store.delete("a:1")
            return deleted, missing

        deleted, missing = asyncio.run(scenario())

        assert deleted and not missing
        assert store.keys("a:") == ["a:2"]
        assert len(store) == 2

    @given(clients=st.integers(min_value=1, max_value=200))
    @settings(max_examples=20)
    def test_released_locks_are_dropped(self, clients: int) -> None:
        """*For any* number of distinct keys, no lock SHALL outlive its last holder."""
        store = InMemoryStore()

        async def scenario():
            for n in range(clients):
                async with store.lock(f"ratelimit:client{n}"):
                    await store.increment(f"ratelimit:client{n}")

        asyncio.run(scenario())

        assert store.lock_count == 0

    def test_lock_serializes_waiters_on_one_key(self) -> None:
        store = InMemoryStore()
        order = []

        async def holder(name: str) -> None:
            async with store.lock("flight:zap.com"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        async def scenario():
            first = asyncio.ensure_future(holder("a"))
            await asyncio.sleep(0)
            counts = store.lock_count
            await asyncio.gather(first, holder("b"))
            return counts

        assert asyncio.run(scenario()) == 1
        assert order == ["a-in", "a-out", "b-in", "b-out"]
        assert store.lock_count == 0

    def test_expired_entries_swept_on_write(self) -> None:
        clock = FakeClock()
        store = InMemoryStore(clock=clock)

        async def scenario():
            for n in range(100):
                await store.increment(f"ratelimit:client{n}", ttl_seconds=30)
            await store.put("persistent", 1)
            clock.advance(InMemoryStore.SWEEP_INTERVAL_SECONDS)
            await store.put("fresh", 2, ttl_seconds=30)

        asyncio.run(scenario())

        assert store.entry_count == 2
        assert sorted(store.keys()) == ["fresh", "persistent"]


class TestResultCacheFreshnessProperty:
    """Entries are served only inside the freshness window."""

    @given(elapsed=st.integers(min_value=0, max_value=200_000))
    @settings(max_examples=100)
    def test_entry_served_while_fresh(self, elapsed: int) -> None:
        """*For any* entry age, the cache SHALL return it only when younger than the window."""
        clock = FakeClock()
        cache = ResultCache(InMemoryStore(clock=clock), freshness_seconds=86_400, clock=clock)

        async def scenario():
            await cache.put(make_appraisal())
            clock.advance(elapsed)
            return await cache.get("zap.com", "abc123")

        entry = asyncio.run(scenario())

        if elapsed < 86_400:
            assert entry is not None
            assert entry.appraisal.domain == "zap.com"
        else:
            assert entry is None

    def test_fingerprints_are_isolated(self) -> None:
        cache = ResultCache(InMemoryStore())

        async def scenario():
            await cache.put(make_appraisal(options_hash="abc123"))
            return await cache.get("zap.com", "other")

        assert asyncio.run(scenario()) is None

    def test_legacy_entry_matches_any_options(self) -> None:
        cache = ResultCache(InMemoryStore())

        async def scenario():
            await cache.put(make_appraisal(options_hash=None))
            return await cache.get("zap.com", "abc123")

        entry = asyncio.run(scenario())

        assert entry is not None
        assert entry.options_hash is None

    def test_newest_of_exact_and_legacy_wins(self) -> None:
        clock = FakeClock()
        cache = ResultCache(InMemoryStore(clock=clock), clock=clock)

        async def scenario():
            await cache.put(make_appraisal(options_hash="abc123"))
            clock.advance(60)
            await cache.put(make_appraisal(options_hash=None))
            return await cache.get("zap.com", "abc123")

        assert asyncio.run(scenario()).options_hash is None

    def test_explicit_created_at_shortens_life(self) -> None:
        clock = FakeClock()
        cache = ResultCache(InMemoryStore(clock=clock), freshness_seconds=100, clock=clock)

        async def scenario():
            await cache.put(make_appraisal(), created_at=clock.now - 90)
            clock.advance(20)
            return await cache.get("zap.com", "abc123")

        assert asyncio.run(scenario()) is None

    def test_stats_count_hits_and_misses(self) -> None:
        cache = ResultCache(InMemoryStore())

        async def scenario():
            await cache.get("zap.com", "abc123")
            await cache.put(make_appraisal())
            await cache.get("zap.com", "abc123")
            await cache.get("zap.com", "abc123")
            return await cache.stats()

        stats = asyncio.run(scenario())

        assert (stats.hits, stats.misses) == (2, 1)

    def test_invalidate(self) -> None:
        cache = ResultCache(InMemoryStore())

        async def scenario():
            await cache.put(make_appraisal())
            removed = await cache.invalidate("zap.com", "abc123")
            return removed, await cache.get("zap.com", "abc123")

        removed, entry = asyncio.run(scenario())

        assert removed
        assert entry is None


class TestResultCacheWhoisPatch:

    def test_patch_is_idempotent(self) -> None:
        clock = FakeClock()
        store = InMemoryStore(clock=clock)
        cache = ResultCache(store, clock=clock)
        snapshot = WhoisSnapshot(domain="zap.com", is_available=False, age_years=12.0)

        async def scenario():
            entry = await cache.put(make_appraisal())
            first = await cache.patch_whois("zap.com", "abc123", snapshot)
            second = await cache.patch_whois("zap.com", "abc123", snapshot)
            patched = await cache.get("zap.com", "abc123")
            return entry, first, second, patched

        entry, first, second, patched = asyncio.run(scenario())

        assert first is True
        assert second is False
        assert patched.appraisal.whois == snapshot
        assert patched.created_at == entry.created_at
        assert patched.appraisal.final_score == entry.appraisal.final_score

    def test_patch_missing_entry(self) -> None:
        cache = ResultCache(InMemoryStore())
        snapshot = WhoisSnapshot(domain="zap.com", is_available=True)

        assert asyncio.run(cache.patch_whois("zap.com", "abc123", snapshot)) is False

    def test_cache_key_format(self) -> None:
        assert cache_key("zap.com", "abc") == "appraisal:zap.com:abc"
        assert cache_key("zap.com", None) == "appraisal:zap.com:legacy"
