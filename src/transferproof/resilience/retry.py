"""
Retry Strategies using Tenacity.

Bounded exponential backoff for transient errors inside the polling stages.
Retries never cross a lifecycle stage boundary.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from transferproof.core.logging import get_logger

logger = get_logger("resilience.retry")

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Backoff parameters.

    The default retries 5 times with exponential backoff (1s, 2s, 4s, 8s, 16s cap).
    """

    max_attempts: int = 5
    min_wait: float = 1.0
    max_wait: float = 16.0
    multiplier: float = 1.0


DEFAULT_RETRY_POLICY = RetryPolicy()


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.log(
        logging.WARNING,
        f"Transient error, retrying (attempt {retry_state.attempt_number}): {exc}",
    )


async def execute_with_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    retry_on: type[BaseException] | tuple[type[BaseException], ...] = Exception,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    sleep: SleepFunc = asyncio.sleep,
    **kwargs: Any,
) -> Any:
    """
    Execute an async function with bounded exponential backoff.

    Only exceptions matching ``retry_on`` are retried; the last one is
    re-raised once ``policy.max_attempts`` is exhausted.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(retry_on),
        wait=wait_exponential(
            multiplier=policy.multiplier, min=policy.min_wait, max=policy.max_wait
        ),
        stop=stop_after_attempt(policy.max_attempts),
        sleep=sleep,
        reraise=True,
        before_sleep=_log_before_sleep,
    ):
        with attempt:
            return await func(*args, **kwargs)
