"""
Fixed window in-memory rate limiter.

Each caller gets a counter and a reset time. The first request after the
reset time opens a new window. Entries are overwritten lazily and never
swept, so the table grows with the number of distinct callers.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Protocol

import structlog
from fastapi import Request

from api.errors import RateLimitedError
from libs.common.settings import Settings

logger = structlog.get_logger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class RateLimitEntry:
    count: int
    reset_time: float  # epoch milliseconds


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    retry_after: int = 0  # seconds, only set when rejected


class RateLimitStore(Protocol):
    def get(self, key: str) -> RateLimitEntry | None: ...

    def set(self, key: str, entry: RateLimitEntry) -> None: ...


class InMemoryRateLimitStore:
    """Process local mapping of caller identifier to entry."""

    def __init__(self) -> None:
        self._entries: Dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def __len__(self) -> int:
        return len(self._entries)


class RateLimiter:
    """Fixed window rate limiter keyed by caller identifier."""

    def __init__(
        self,
        max_requests: int = 100,
        window_ms: int = 60000,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = _now_ms,
        enabled: bool = True,
        trust_proxy: bool = False,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum requests admitted per window
            window_ms: Window length in milliseconds
            store: Entry storage, a fresh in-memory store by default
            clock: Returns the current time in epoch milliseconds
            enabled: Whether rate limiting is enabled
            trust_proxy: Key on the hop appended by the fronting proxy
                instead of the socket peer
        """
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.clock = clock
        self.enabled = enabled
        self.trust_proxy = trust_proxy
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RateLimiter":
        return cls(
            max_requests=settings.rate_limit_max,
            window_ms=settings.rate_limit_window,
            trust_proxy=settings.trust_proxy,
            **kwargs,
        )

    def get_client_id(self, request: Request) -> str:
        """Get client identifier (network address) from request."""
        if self.trust_proxy:
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                # Earlier hops are caller supplied; the last one was added by the proxy
                return forwarded_for.split(",")[-1].strip()
        return request.client.host if request.client else "unknown"

    def hit(self, identifier: str) -> RateLimitDecision:
        """Record one request for identifier and decide whether to admit it."""
        if not self.enabled:
            return RateLimitDecision(allowed=True, count=0)

        with self._lock:
            now = self.clock()
            entry = self.store.get(identifier)

            if entry is None or now > entry.reset_time:
                entry = RateLimitEntry(count=1, reset_time=now + self.window_ms)
                self.store.set(identifier, entry)
                return RateLimitDecision(allowed=True, count=1)

            if entry.count < self.max_requests:
                entry.count += 1
                self.store.set(identifier, entry)
                return RateLimitDecision(allowed=True, count=entry.count)

            retry_after = math.ceil((entry.reset_time - now) / 1000)
            return RateLimitDecision(allowed=False, count=entry.count, retry_after=retry_after)

    async def check_rate_limit(self, request: Request) -> None:
        """
        Check if request exceeds rate limit.

        Raises:
            RateLimitedError: 429 if rate limit exceeded
        """
        client_id = self.get_client_id(request)
        decision = self.hit(client_id)

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                client_id=client_id,
                current_count=decision.count,
                max_requests=self.max_requests,
                window_ms=self.window_ms,
                retry_after=decision.retry_after,
            )
            raise RateLimitedError(retry_after=decision.retry_after)

        logger.debug(
            "Rate limit check passed",
            client_id=client_id,
            request_count=decision.count,
            max_requests=self.max_requests,
        )
