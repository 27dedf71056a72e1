"""Sliding-window request/token rate limiter for AI calls.

Admission is decided against three independent checks, evaluated in order:
1. Requests recorded in the last 60s vs requests_per_minute
2. Tokens recorded in the last 60s plus the estimate vs tokens_per_minute
3. Requests recorded in the last 10s vs burst_limit

Admission uses an estimate; accounting (record_request) uses the actual
usage reported by the provider when available. The window is mutated only by
synchronous methods, so event-loop scheduling serialises every mutation; the
check/record pair spanning a provider await is not atomic, and concurrent
callers may be transiently over-admitted.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, Field

from scholar.config.models.providers import RateLimitConfig

WINDOW_SECONDS = 60.0
BURST_WINDOW_SECONDS = 10.0
# Default burst limit is one tenth of the per-minute request budget
BURST_DIVISOR = 10
DEFAULT_ESTIMATE = 1000


@dataclass(frozen=True)
class RateWindowEntry:
    """One recorded request."""

    timestamp: float
    tokens: int


class RateLimitDecision(BaseModel):
    """Result of an admission check."""

    allowed: bool
    retry_after: int | None = Field(
        default=None,
        description="Seconds until the violated budget frees up",
    )


class RateLimitStats(BaseModel):
    """Usage within the current window."""

    requests_in_last_minute: int
    tokens_in_last_minute: int
    requests_remaining: int
    tokens_remaining: int


class RateLimiter:
    """In-memory sliding window limiter over requests and tokens.

    One instance per AI service; share an instance explicitly to share a
    budget.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        tokens_per_minute: int = 90_000,
        burst_limit: int | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            requests_per_minute: Maximum requests in any 60s window
            tokens_per_minute: Maximum tokens in any 60s window
            burst_limit: Maximum requests in any 10s window
                (default: 10% of requests_per_minute, rounded up)
            clock: Source of the current time in seconds
        """
        self._requests_per_minute = requests_per_minute
        self._tokens_per_minute = tokens_per_minute
        self._burst_limit = (
            burst_limit
            if burst_limit is not None
            else -(-requests_per_minute // BURST_DIVISOR)
        )
        self._clock = clock
        self._entries: list[RateWindowEntry] = []

    @classmethod
    def from_config(
        cls, config: RateLimitConfig, *, clock: Callable[[], float] = time.time
    ) -> "RateLimiter":
        """Build a limiter from configuration."""
        return cls(
            requests_per_minute=config.requests_per_minute,
            tokens_per_minute=config.tokens_per_minute,
            burst_limit=config.burst_limit,
            clock=clock,
        )

    @property
    def burst_limit(self) -> int:
        """Maximum requests admitted in any 10s window."""
        return self._burst_limit

    def check_limit(self, estimated_tokens: int = DEFAULT_ESTIMATE) -> RateLimitDecision:
        """Decide whether a call estimated at `estimated_tokens` may proceed.

        Does not record anything; call record_request after the call succeeds.
        """
        now = self._clock()
        self._prune(now)

        if len(self._entries) >= self._requests_per_minute:
            oldest = min(entry.timestamp for entry in self._entries)
            return RateLimitDecision(
                allowed=False,
                retry_after=self._seconds_until_expiry(oldest, now),
            )

        total_tokens = sum(entry.tokens for entry in self._entries)
        if total_tokens + estimated_tokens > self._tokens_per_minute:
            return RateLimitDecision(
                allowed=False,
                retry_after=self._token_retry_after(
                    total_tokens + estimated_tokens - self._tokens_per_minute, now
                ),
            )

        recent = sum(
            1 for entry in self._entries if entry.timestamp > now - BURST_WINDOW_SECONDS
        )
        if self._burst_limit and recent >= self._burst_limit:
            return RateLimitDecision(allowed=False, retry_after=int(BURST_WINDOW_SECONDS))

        return RateLimitDecision(allowed=True)

    def record_request(self, actual_tokens: int) -> None:
        """Record a completed request and the tokens it consumed."""
        self._entries.append(RateWindowEntry(timestamp=self._clock(), tokens=actual_tokens))

    def get_stats(self) -> RateLimitStats:
        """Return usage within the current window."""
        now = self._clock()
        recent = [entry for entry in self._entries if entry.timestamp > now - WINDOW_SECONDS]
        requests = len(recent)
        tokens = sum(entry.tokens for entry in recent)

        return RateLimitStats(
            requests_in_last_minute=requests,
            tokens_in_last_minute=tokens,
            requests_remaining=max(0, self._requests_per_minute - requests),
            tokens_remaining=max(0, self._tokens_per_minute - tokens),
        )

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._entries.clear()

    def _prune(self, now: float) -> None:
        cutoff = now - WINDOW_SECONDS
        self._entries = [entry for entry in self._entries if entry.timestamp > cutoff]

    def _seconds_until_expiry(self, timestamp: float, now: float) -> int:
        return max(0, math.ceil(timestamp + WINDOW_SECONDS - now))

    def _token_retry_after(self, tokens_to_free: int, now: float) -> int:
        """Seconds until enough of the oldest entries expire to free the overshoot."""
        for entry in sorted(self._entries, key=lambda e: e.timestamp):
            tokens_to_free -= entry.tokens
            if tokens_to_free <= 0:
                return self._seconds_until_expiry(entry.timestamp, now)
        return int(WINDOW_SECONDS)
