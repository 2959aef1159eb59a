"""Tests for the timeout retry policy."""

from unittest.mock import AsyncMock

import httpx
import pytest

from trackmirror.config import RetrySettings
from trackmirror.domain.exceptions import ProviderTransportError, RetriesExhaustedError
from trackmirror.infrastructure.retry import RetryEvent, RetryPolicy


@pytest.fixture
def events() -> list[RetryEvent]:
    return []


@pytest.fixture
def policy(events: list[RetryEvent]) -> RetryPolicy:
    # No sleeping in tests
    return RetryPolicy(initial_delay=0, listener=events.append)


class TestRetryPolicy:
    """Test retry decisions."""

    async def test_success_first_try(self, policy: RetryPolicy, events) -> None:
        operation = AsyncMock(return_value="ok")

        assert await policy.execute(operation) == "ok"
        assert operation.await_count == 1
        assert events == []

    async def test_two_timeouts_then_success(self, policy: RetryPolicy, events) -> None:
        """Test that two timeouts followed by success report exactly two retries."""
        operation = AsyncMock(
            side_effect=[httpx.ReadTimeout("slow"), httpx.ConnectTimeout("slow"), "ok"]
        )

        assert await policy.execute(operation, label="lastfm search") == "ok"
        assert operation.await_count == 3
        assert [e.attempt for e in events] == [1, 2]
        assert all(e.max_attempts == 3 for e in events)
        assert all(e.label == "lastfm search" for e in events)

    async def test_exhausted_budget(self, policy: RetryPolicy, events) -> None:
        operation = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await policy.execute(operation, provider="tidal")

        assert operation.await_count == 3
        assert len(events) == 2
        assert exc_info.value.attempts == 3
        assert exc_info.value.provider == "tidal"
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    async def test_non_timeout_not_retried(self, policy: RetryPolicy, events) -> None:
        """Test that transport errors surface on first occurrence."""
        operation = AsyncMock(side_effect=ProviderTransportError("HTTP 500"))

        with pytest.raises(ProviderTransportError):
            await policy.execute(operation)

        assert operation.await_count == 1
        assert events == []

    async def test_backoff_delays(self, mocker) -> None:
        sleep = mocker.patch("trackmirror.infrastructure.retry.asyncio.sleep", new=AsyncMock())
        policy = RetryPolicy(max_retries=4, initial_delay=0.5, backoff_factor=2.0, max_delay=1.5)
        operation = AsyncMock(side_effect=[httpx.ReadTimeout("slow")] * 4 + ["ok"])

        await policy.execute(operation)

        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0, 1.5, 1.5]

    def test_from_settings(self) -> None:
        policy = RetryPolicy.from_settings(RetrySettings(max_retries=0))
        assert policy.max_attempts == 1
        assert policy.is_transient(httpx.ReadTimeout("slow"))
        assert not policy.is_transient(ProviderTransportError("boom"))
