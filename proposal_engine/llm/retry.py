"""Exponential-backoff retry for async operations.

The retry decision is made purely from the ``retryable`` attribute carried
by the raised exception. Exceptions that do not carry the attribute are
treated as retryable; an explicit ``retryable = False`` stops the loop
immediately.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_DELAY = 1.0  # seconds


def is_retryable(error: BaseException) -> bool:
    """Whether the retry loop may try again after ``error``."""
    return getattr(error, "retryable", True) is not False


def backoff_delay(attempt: int, initial_delay: float = DEFAULT_INITIAL_DELAY) -> float:
    """Delay before the retry following zero-indexed ``attempt``."""
    return initial_delay * (2 ** attempt)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    correlation_id: str | None = None,
) -> T:
    """Run ``fn`` with up to ``max_retries`` retries and exponential backoff.

    Args:
        fn: Zero-argument coroutine factory; called once per attempt.
        max_retries: Retries after the first attempt (worst case
            ``max_retries + 1`` calls).
        initial_delay: Seconds to wait before the first retry; doubles
            after each further failure.
        correlation_id: Optional ID attached to log records.

    Returns:
        The first successful result.

    Raises:
        The first non-retryable exception unchanged, or the last exception
        once attempts are exhausted.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    attempts = max_retries + 1
    last_error: Exception | None = None

    for attempt in range(attempts):
        try:
            return await fn()
        except Exception as e:
            if not is_retryable(e):
                logger.debug(
                    "Non-retryable error on attempt %d/%d: %s",
                    attempt + 1,
                    attempts,
                    str(e),
                    extra={
                        "correlation_id": correlation_id,
                        "attempt": attempt + 1,
                        "error_type": type(e).__name__,
                    },
                )
                raise

            last_error = e
            if attempt >= max_retries:
                break

            delay = backoff_delay(attempt, initial_delay)
            logger.warning(
                "Retryable error on attempt %d/%d: %s. Retrying in %.2fs",
                attempt + 1,
                attempts,
                str(e),
                delay,
                extra={
                    "correlation_id": correlation_id,
                    "attempt": attempt + 1,
                    "delay_seconds": delay,
                    "error_type": type(e).__name__,
                    "code": getattr(getattr(e, "code", None), "value", None),
                },
            )
            await asyncio.sleep(delay)

    logger.warning(
        "Giving up after %d attempts",
        attempts,
        extra={"correlation_id": correlation_id, "attempts": attempts},
    )
    if last_error:
        raise last_error
