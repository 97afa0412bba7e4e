"""
Rate Limiter module for the domain appraiser.

Fixed-window request ceiling per client identifier. Window state lives in a
KeyValueStore and each client's window is updated under that client's own
lock, so concurrent requests from different clients never serialize on
each other.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from domain_appraiser.config import RateLimitConfig
from domain_appraiser.exceptions import RateLimitError
from domain_appraiser.kv_store import InMemoryStore, KeyValueStore
from domain_appraiser.models import RateLimitWindow


@dataclass
class RateLimitStatus:
    """Result of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: float
    retry_after_seconds: int = 0

    def headers(self) -> dict[str, str]:
        """HTTP-style rate limit headers."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_time)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "limit": self.limit,
            "remaining": self.remaining,
            "reset_time": self.reset_time,
            "retry_after_seconds": self.retry_after_seconds,
        }


class RateLimiter:
    """
    Per-client fixed-window rate limiter.

    The first request (or the first after the window has passed) opens a
    window with count 1. Further requests increment the count until the
    ceiling, after which they are rejected until the window resets.
    """

    KEY_PREFIX = "ratelimit:"

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        store: Optional[KeyValueStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the rate limiter.

        Args:
            config: Ceiling and window length
            store: Shared key-value store (an in-memory store when omitted)
            clock: Time source in epoch seconds
        """
        self._config = config or RateLimitConfig()
        self._clock = clock
        self._store = store if store is not None else InMemoryStore(clock=clock)

    @property
    def limit(self) -> int:
        return self._config.max_requests

    def _key(self, client_id: str) -> str:
        return f"{self.KEY_PREFIX}{client_id}"

    def _retry_after(self, reset_time: float, now: float) -> int:
        return max(1, math.ceil(reset_time - now))

    async def check(self, client_id: str) -> RateLimitStatus:
        """
        Count one request for a client.

        Returns:
            RateLimitStatus; allowed is False once the ceiling is reached
        """
        key = self._key(client_id)
        async with self._store.lock(key):
            now = self._clock()
            window: Optional[RateLimitWindow] = await self._store.get(key)

            if window is None or now > window.reset_time:
                window = RateLimitWindow(count=1, reset_time=now + self._config.window_seconds)
                await self._store.put(key, window, ttl_seconds=self._config.window_seconds)
                return RateLimitStatus(
                    allowed=True,
                    limit=self.limit,
                    remaining=self.limit - 1,
                    reset_time=window.reset_time,
                )

            if window.count >= self.limit:
                return RateLimitStatus(
                    allowed=False,
                    limit=self.limit,
                    remaining=0,
                    reset_time=window.reset_time,
                    retry_after_seconds=self._retry_after(window.reset_time, now),
                )

            window = RateLimitWindow(count=window.count + 1, reset_time=window.reset_time)
            await self._store.put(key, window, ttl_seconds=max(window.reset_time - now, 0.0))
            return RateLimitStatus(
                allowed=True,
                limit=self.limit,
                remaining=max(0, self.limit - window.count),
                reset_time=window.reset_time,
            )

    async def peek(self, client_id: str) -> RateLimitStatus:
        """Report a client's standing without counting a request."""
        now = self._clock()
        window: Optional[RateLimitWindow] = await self._store.get(self._key(client_id))
        if window is None or now > window.reset_time:
            return RateLimitStatus(
                allowed=True,
                limit=self.limit,
                remaining=self.limit,
                reset_time=now + self._config.window_seconds,
            )
        remaining = max(0, self.limit - window.count)
        return RateLimitStatus(
            allowed=remaining > 0,
            limit=self.limit,
            remaining=remaining,
            reset_time=window.reset_time,
            retry_after_seconds=0 if remaining else self._retry_after(window.reset_time, now),
        )

    async def window(self, client_id: str) -> Optional[RateLimitWindow]:
        return await self._store.get(self._key(client_id))

    async def enforce(self, client_id: str) -> RateLimitStatus:
        """
        Count one request, raising when the ceiling is exceeded.

        Raises:
            RateLimitError: With retry_after_seconds, reset_time and remaining=0
        """
        status = await self.check(client_id)
        if not status.allowed:
            raise RateLimitError(
                code="rate_limited",
                message=(
                    f"Rate limit exceeded. You have reached the maximum of "
                    f"{status.limit} evaluations per window."
                ),
                details={
                    "client_id": client_id,
                    "limit": status.limit,
                    "remaining": 0,
                    "reset_time": status.reset_time,
                    "retry_after_seconds": status.retry_after_seconds,
                },
            )
        return status

    async def reset(self, client_id: str) -> None:
        await self._store.delete(self._key(client_id))
