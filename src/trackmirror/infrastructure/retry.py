# Hey future me - this is the ONE place that decides whether a provider call gets another go.
#
# Timeouts are TEMPORARY - the provider was slow, not wrong. Waiting a bit and asking again
# usually works. Everything else (connection refused, HTTP 500, garbage JSON) is NOT retried:
# hammering a broken endpoint three times just triples the latency of the failure.
#
# USAGE:
#   policy = RetryPolicy.from_settings(settings.retry)
#   data = await policy.execute(lambda: client.search_tracks(q, 6), label="lastfm search")
#
# After max_retries extra attempts, execute() raises RetriesExhaustedError. The engine turns
# that into NotFound - running out of retries is not fatal to the caller.
"""Timeout retry policy for provider calls."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import httpx

from trackmirror.domain.exceptions import RetriesExhaustedError

if TYPE_CHECKING:
    from trackmirror.config.settings import RetrySettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryEvent:
    """One retry decision, handed to the optional listener."""

    label: str
    attempt: int  # attempt that just failed, 1-based
    max_attempts: int
    delay: float
    error: BaseException


RetryListener = Callable[[RetryEvent], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry transient (timeout) failures with exponential backoff.

    The backoff is exponential: 0.5s → 1s → 2s (capped at max_delay).

    Attributes:
        max_retries: Extra attempts after the first one (default: 2)
        initial_delay: Delay before the first retry in seconds (default: 0.5)
        backoff_factor: Multiply delay by this each retry (default: 2.0)
        max_delay: Maximum delay cap in seconds (default: 5.0)
        retry_on: Exception types that count as transient
        listener: Called once per retry, e.g. to count retry events
    """

    max_retries: int = 2
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 5.0
    retry_on: tuple[type[BaseException], ...] = (httpx.TimeoutException,)
    listener: RetryListener | None = field(default=None, compare=False)

    @classmethod
    def from_settings(
        cls, settings: RetrySettings, listener: RetryListener | None = None
    ) -> RetryPolicy:
        """Build a policy from the ``retry`` settings section."""
        return cls(
            max_retries=settings.max_retries,
            initial_delay=settings.initial_delay,
            backoff_factor=settings.backoff_factor,
            max_delay=settings.max_delay,
            listener=listener,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def is_transient(self, exception: BaseException) -> bool:
        """Check if an exception should be retried under this policy."""
        return isinstance(exception, self.retry_on)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        label: str = "provider call",
        provider: str | None = None,
    ) -> T:
        """Run ``operation``, retrying transient failures.

        Args:
            operation: Zero-argument callable returning a fresh awaitable per attempt
            label: Human-readable name for log lines
            provider: Provider name attached to RetriesExhaustedError

        Returns:
            Result of the first successful attempt

        Raises:
            RetriesExhaustedError: Every attempt failed with a transient error
            Exception: Any non-transient error, unchanged and on first occurrence
        """
        delay = self.initial_delay
        start_time = time.monotonic()

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    elapsed_ms = (time.monotonic() - start_time) * 1000
                    logger.error(
                        "%s timed out after %d attempts (%.0fms total), giving up",
                        label,
                        self.max_attempts,
                        elapsed_ms,
                    )
                    raise RetriesExhaustedError(
                        f"{label} timed out after {self.max_attempts} attempts",
                        attempts=self.max_attempts,
                        provider=provider,
                    ) from e

                logger.warning(
                    "%s timed out (attempt %d/%d), retrying in %.1fs",
                    label,
                    attempt,
                    self.max_attempts,
                    delay,
                )
                if self.listener is not None:
                    self.listener(
                        RetryEvent(
                            label=label,
                            attempt=attempt,
                            max_attempts=self.max_attempts,
                            delay=delay,
                            error=e,
                        )
                    )
                if delay > 0:
                    await asyncio.sleep(delay)
                delay = min(delay * self.backoff_factor, self.max_delay)

        # max_attempts is always >= 1, the loop returns or raises
        raise RuntimeError("Unexpected state in RetryPolicy.execute")
