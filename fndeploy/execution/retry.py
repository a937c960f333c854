"""Bounded exponential-backoff retry for async operations, built on tenacity.

`retry_async` runs an operation up to ``1 + max_retries`` times. Between
attempts it sleeps for a randomised, exponentially growing interval. An
error the classifier marks as fatal is raised straight away; a transient
error is raised once the budget (attempts or wall clock) runs out.

Cancellation is never swallowed: asyncio.CancelledError raised inside the
operation or during a backoff sleep propagates unchanged.

Defaults: 0.5s first interval, x1.5 per retry, ±50% jitter, 60s cap per
sleep, 15 minutes overall.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    stop_before_delay,
    stop_never,
)
from tenacity.wait import wait_base

from fndeploy.execution.failure_classifier import is_transient

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryPolicy:
    """Backoff parameters for one retried operation."""

    max_retries: int = 3
    initial_interval: float = 0.5
    multiplier: float = 1.5
    randomization_factor: float = 0.5
    max_interval: float = 60.0
    # Overall ceiling in seconds; None disables it.
    max_elapsed: Optional[float] = 900.0

    def interval(self, retry: int, rng: Callable[[], float] = random.random) -> float:
        """Sleep before retry number `retry` (1-based)."""
        base = min(self.max_interval, self.initial_interval * self.multiplier ** (retry - 1))
        delta = self.randomization_factor * base
        return max(0.0, base - delta + rng() * 2 * delta)


class wait_policy(wait_base):
    """tenacity wait strategy that delegates to RetryPolicy.interval."""

    def __init__(self, policy: RetryPolicy):
        self.policy = policy

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.policy.interval(retry_state.attempt_number)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    is_retryable: Callable[[BaseException], bool] = is_transient,
    sleep: Sleep = asyncio.sleep,
    description: str = "operation",
) -> T:
    """Run `operation` with retries and return its result.

    The wall-clock ceiling is checked before each sleep: a retry whose
    backoff would end past `max_elapsed` is not attempted.

    Raises:
        The last error from `operation` once retries are exhausted, or the
        first error `is_retryable` rejects.
    """
    policy = policy or RetryPolicy()

    stop = stop_after_attempt(policy.max_retries + 1)
    stop = stop | (stop_before_delay(policy.max_elapsed) if policy.max_elapsed is not None else stop_never)

    def _before_sleep(retry_state: RetryCallState) -> None:
        logger.warning(
            "%s failed (attempt %d/%d), retrying in %.2fs: %s",
            description,
            retry_state.attempt_number,
            policy.max_retries + 1,
            retry_state.upcoming_sleep,
            retry_state.outcome.exception(),
        )

    def _give_up(retry_state: RetryCallState) -> T:
        logger.error(
            "%s failed after %d attempt(s): %s",
            description, retry_state.attempt_number, retry_state.outcome.exception(),
        )
        return retry_state.outcome.result()

    retrying = AsyncRetrying(
        stop=stop,
        wait=wait_policy(policy),
        # BaseExceptions such as CancelledError are never retried.
        retry=retry_if_exception(lambda exc: isinstance(exc, Exception) and is_retryable(exc)),
        before_sleep=_before_sleep,
        retry_error_callback=_give_up,
        sleep=sleep,
    )
    return await retrying(operation)
