"""Exponential-backoff retry shared by every backend.

The three vendor SDKs raise unrelated exception types, so classification is
done on the HTTP status they carry rather than on the exception class:

* 400 / 401 / 403 are terminal and re-raised on the first occurrence.
* Anything else (timeouts, 5xx, 429, connection failures) is retried up to
  ``max_retries`` times with delays of ``base_delay * 2**n`` seconds.
* Once the budget is spent the most recent error is re-raised unchanged.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from promptenhancer.providers.errors import ConfigurationError, status_code_of

T = TypeVar("T")

TERMINAL_STATUS_CODES: frozenset[int] = frozenset({400, 401, 403})

_log = structlog.get_logger(__name__)


def is_terminal_error(error: BaseException) -> bool:
    """Return ``True`` when *error* must not be retried."""
    if not isinstance(error, Exception):
        # Cancellation and interpreter exits are never retried.
        return True
    if isinstance(error, ConfigurationError):
        return True
    return status_code_of(error) in TERMINAL_STATUS_CODES


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def _before_sleep(retry_state: RetryCallState) -> None:
    """Tenacity ``before_sleep`` hook that emits a structured debug event."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    next_action = retry_state.next_action
    wait_seconds = next_action.sleep if next_action is not None else 0.0
    _log.debug(
        "provider_retry",
        attempt=retry_state.attempt_number,
        wait_seconds=round(wait_seconds, 2),
        error_type=type(exc).__name__ if exc else None,
        error=str(exc) if exc else None,
    )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
) -> T:
    """Run *operation* until it succeeds, fails terminally, or runs out of attempts.

    Args:
        operation: Zero-argument coroutine function.  It is called afresh for
            every attempt, so it must rebuild any request it sends.
        max_retries: Retries allowed after the first attempt (``3`` means four
            calls in total).
        base_delay: Delay in seconds before the first retry; doubled for each
            subsequent retry.

    Returns:
        Whatever *operation* returns on its first successful attempt.

    Raises:
        Exception: The terminal error, or the last transient error once the
            retry budget is exhausted.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        retry=retry_if_exception(lambda exc: not is_terminal_error(exc)),
        wait=wait_exponential(multiplier=base_delay, min=0),
        sleep=_sleep,
        before_sleep=_before_sleep,
        reraise=True,
    ):
        with attempt:
            return await operation()

    raise AssertionError("unreachable: tenacity always returns or raises")  # pragma: no cover
