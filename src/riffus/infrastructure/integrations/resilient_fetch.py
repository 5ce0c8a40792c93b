# Hey future me - this is THE retry wrapper for every outbound provider call!
#
# Upstream catalogs flake: timeouts, 5xx, connection resets. Waiting a bit and
# trying again almost always works, so every provider request goes through here
# instead of failing the user's request on the first hiccup.
#
# BACKOFF IS LINEAR, not exponential: attempt 2 waits 1x retry_delay, attempt 3
# waits 2x, and so on. With the defaults (3 attempts, 1000ms) a dead upstream
# costs 1s + 2s of sleeping plus up to 3 x 10s of attempt timeouts.
#
# USAGE:
#   fetcher = ResilientFetcher(RetryPolicy(max_retries=3, retry_delay_ms=1000))
#   response = await fetcher.run(lambda: client.get("/search", params=params))
"""Bounded retry with linear backoff for outbound calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration.

    Attributes:
        max_retries: Total number of attempts (not additional retries)
        retry_delay_ms: Base delay; the wait before attempt i is retry_delay_ms * (i - 1)
        timeout_ms: Upper bound for a single attempt
    """

    max_retries: int = 3
    retry_delay_ms: int = 1000
    timeout_ms: int = 10000

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.retry_delay_ms < 0:
            raise ValueError("retry_delay_ms must not be negative")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before the given 1-indexed attempt."""
        if attempt <= 1:
            return 0.0
        return self.retry_delay_ms * (attempt - 1) / 1000


class ResilientFetcher:
    """Run a single-attempt operation with bounded retries.

    Generic over the operation's result: it knows nothing about HTTP, tracks
    or search. Holds no mutable state, so one instance can serve concurrent
    requests.

    Every failure is retried unless a ``should_retry`` predicate says
    otherwise. After the last attempt the last error is re-raised unchanged.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        should_retry: Callable[[Exception], bool] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize fetcher.

        Args:
            policy: Retry configuration (defaults: 3 attempts, 1000ms, 10000ms)
            should_retry: Optional classifier; returning False stops retrying
            sleep: Awaitable sleep, injectable for tests
        """
        self.policy = policy or RetryPolicy()
        self._should_retry = should_retry
        self._sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]], name: str = "request") -> T:
        """Execute ``operation`` until it succeeds or attempts run out.

        Args:
            operation: Zero-argument callable performing exactly one attempt
            name: Label used in log messages

        Returns:
            Whatever the first successful attempt returned

        Raises:
            Exception: The last attempt's error, unchanged
        """
        max_attempts = self.policy.max_retries
        timeout = self.policy.timeout_ms / 1000

        for attempt in range(1, max_attempts + 1):
            delay = self.policy.delay_before(attempt)
            if delay > 0:
                await self._sleep(delay)

            try:
                return await asyncio.wait_for(operation(), timeout=timeout)
            except Exception as e:
                if self._should_retry is not None and not self._should_retry(e):
                    logger.warning(
                        "%s failed with non-retryable %s: %s",
                        name,
                        type(e).__name__,
                        e,
                    )
                    raise

                if attempt == max_attempts:
                    logger.error(
                        "%s failed after %d attempts: %s: %s",
                        name,
                        max_attempts,
                        type(e).__name__,
                        e,
                    )
                    raise

                logger.warning(
                    "%s attempt %d/%d failed (%s: %s), retrying in %.1fs",
                    name,
                    attempt,
                    max_attempts,
                    type(e).__name__,
                    e,
                    self.policy.delay_before(attempt + 1),
                )

        # Unreachable: the loop either returns or raises on the final attempt.
        raise RuntimeError("Unexpected state in ResilientFetcher.run")
