"""
Polling primitives.

A poll is a pure step function from the latest response to a decision
(continue or done), plus a runner that owns the timing: interval, attempt
cap, wall-clock cap and cancellation. The runner takes its ``sleep`` and
``clock`` as parameters so tests can drive it with a fake clock.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

from transferproof.core.exceptions import PollCancelledError
from transferproof.core.logging import get_logger

logger = get_logger("retrieval.polling")

T = TypeVar("T")
R = TypeVar("R")


class PollAction(str, Enum):
    """What a step function wants the runner to do next."""

    CONTINUE = "continue"
    DONE = "done"


@dataclass(frozen=True)
class PollDecision(Generic[T]):
    action: PollAction
    value: T | None = None
    reason: str = ""

    @classmethod
    def keep_polling(cls, reason: str = "") -> "PollDecision[Any]":
        return cls(action=PollAction.CONTINUE, reason=reason)

    @classmethod
    def done(cls, value: T) -> "PollDecision[T]":
        return cls(action=PollAction.DONE, value=value)

    @property
    def is_done(self) -> bool:
        return self.action is PollAction.DONE


@dataclass(frozen=True)
class PollPolicy:
    """
    Timing for one polling loop.

    Args:
        interval: Seconds slept between polls
        max_attempts: Polls before giving up (None = no attempt cap)
        max_wait: Seconds before giving up (None = no time cap)
    """

    interval: float
    max_attempts: int | None = None
    max_wait: float | None = None

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError("Poll interval must not be negative")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.max_wait is not None and self.max_wait < 0:
            raise ValueError("max_wait must not be negative")

    @property
    def is_bounded(self) -> bool:
        return self.max_attempts is not None or self.max_wait is not None


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    value: T
    attempts: int
    elapsed: float


async def poll_until(
    fetch: Callable[[], Awaitable[R]],
    step: Callable[[R], PollDecision[T]],
    policy: PollPolicy,
    on_exhausted: Callable[[int, float], Exception],
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
    cancel_event: asyncio.Event | None = None,
    label: str = "poll",
) -> PollOutcome[T]:
    """
    Fetch, decide, sleep, repeat.

    Args:
        fetch: One poll (network call)
        step: Pure decision over the fetched response
        policy: Interval and caps
        on_exhausted: Builds the error raised when a cap is hit, given
            (attempts, elapsed seconds)
        sleep: Awaitable sleep
        clock: Monotonic clock in seconds
        cancel_event: Checked before every poll
        label: Name used in log lines

    Raises:
        PollCancelledError: ``cancel_event`` was set
        Exception: Whatever ``on_exhausted`` returns, when a cap is hit
    """
    started = clock()
    attempts = 0
    limit = policy.max_attempts if policy.max_attempts is not None else "∞"

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise PollCancelledError(f"{label} cancelled after {attempts} polls", attempts=attempts)

        response = await fetch()
        attempts += 1
        decision = step(response)
        if decision.is_done:
            return PollOutcome(value=decision.value, attempts=attempts, elapsed=clock() - started)  # type: ignore[arg-type]

        elapsed = clock() - started
        if policy.max_attempts is not None and attempts >= policy.max_attempts:
            raise on_exhausted(attempts, elapsed)
        if policy.max_wait is not None and elapsed + policy.interval > policy.max_wait:
            raise on_exhausted(attempts, elapsed)

        logger.info(f"{label}: {decision.reason or 'not ready'}, waiting... ({attempts}/{limit})")
        await sleep(policy.interval)
