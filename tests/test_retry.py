"""Tests for bounded exponential backoff."""

from unittest.mock import AsyncMock

import pytest

from transferproof.core.exceptions import ProofRetrievalError, ValidationError
from transferproof.resilience.retry import DEFAULT_RETRY_POLICY, RetryPolicy, execute_with_retry


class TestExecuteWithRetry:
    """Tests for execute_with_retry."""

    def test_default_policy(self) -> None:
        assert DEFAULT_RETRY_POLICY.max_attempts == 5
        assert DEFAULT_RETRY_POLICY.min_wait == 1.0
        assert DEFAULT_RETRY_POLICY.max_wait == 16.0

    @pytest.mark.asyncio
    async def test_success_first_try(self) -> None:
        func = AsyncMock(return_value="ok")
        sleep = AsyncMock()

        result = await execute_with_retry(func, 1, key="v", sleep=sleep)

        assert result == "ok"
        func.assert_awaited_once_with(1, key="v")
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transient_then_success(self) -> None:
        func = AsyncMock(side_effect=[ProofRetrievalError("503"), ProofRetrievalError("503"), "ok"])
        sleep = AsyncMock()

        result = await execute_with_retry(func, retry_on=ProofRetrievalError, sleep=sleep)

        assert result == "ok"
        assert func.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_reraises_last_error(self) -> None:
        func = AsyncMock(side_effect=ProofRetrievalError("still down"))
        sleep = AsyncMock()
        policy = RetryPolicy(max_attempts=3)

        with pytest.raises(ProofRetrievalError, match="still down"):
            await execute_with_retry(func, retry_on=ProofRetrievalError, policy=policy, sleep=sleep)

        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self) -> None:
        func = AsyncMock(side_effect=ValidationError("bad input"))
        sleep = AsyncMock()

        with pytest.raises(ValidationError):
            await execute_with_retry(func, retry_on=ProofRetrievalError, sleep=sleep)

        assert func.await_count == 1
