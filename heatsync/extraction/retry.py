"""Bounded exponential-backoff retry, independent of any call site."""

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from heatsync.extraction.exceptions import RetryExhaustedError, TransientUpstreamError
from heatsync.logging.logger import Log

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently to retry a failing operation."""

    max_attempts: int = 3
    base_delay_seconds: float = 2.0
    backoff_multiplier: float = 2.0
    retry_on: tuple[type[BaseException], ...] = (TransientUpstreamError,)

    def also_retrying(self, *errors: type[BaseException]) -> "RetryPolicy":
        """Same timing, with errors added to retry_on."""
        extra = tuple(e for e in errors if e not in self.retry_on)
        return replace(self, retry_on=self.retry_on + extra)


def with_retry(
    policy: RetryPolicy,
    operation: Callable[[], T],
    *,
    label: str = "Operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run operation, retrying policy.retry_on errors with exponential backoff.

    Errors outside policy.retry_on propagate immediately.

    Raises:
        RetryExhaustedError: once max_attempts attempts have all failed.
    """
    retrying = Retrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.base_delay_seconds,
            exp_base=policy.backoff_multiplier,
        ),
        retry=retry_if_exception_type(policy.retry_on),
        before_sleep=_log_retry(label, policy.max_attempts),
        sleep=sleep,
        reraise=False,
    )
    try:
        return retrying(operation)
    except RetryError as exc:
        last_error = exc.last_attempt.exception()
        Log.error(f"{label}: giving up after {policy.max_attempts} attempts: {last_error}")
        raise RetryExhaustedError(label, policy.max_attempts, last_error) from last_error


def _log_retry(label: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def log(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome is not None else None
        delay = state.next_action.sleep if state.next_action is not None else 0.0
        Log.warning(
            f"{label}: attempt {state.attempt_number}/{max_attempts} failed: {error}; "
            f"retrying in {delay:.1f}s"
        )

    return log
