"""Bounded retry with a fixed delay.

Used for operations that can fail transiently on a local filesystem:
moving a directory another process briefly holds open, invoking an
external link command, and similar.
"""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Raised when every attempt of a retried operation failed.

    Attributes:
        attempts: Number of attempts that were made.
        last_error: The exception raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed after {attempts} attempt(s): {last_error}")


def retry(
    max_attempts: int,
    delay: float,
    body: Callable[[], T],
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``body`` until it succeeds or ``max_attempts`` is reached.

    The delay between attempts is constant. There is no jitter and no
    exponential backoff.

    Args:
        max_attempts: Total number of attempts (must be at least 1).
        delay: Seconds to wait between attempts.
        body: Zero-argument callable to execute.
        retry_on: Exception types that trigger another attempt. Anything
            else propagates immediately.
        sleep: Sleep function (replaced in tests).

    Returns:
        The value returned by the first successful attempt.

    Raises:
        ValueError: If max_attempts is less than 1.
        RetryExhaustedError: If all attempts failed.
    """
    if max_attempts < 1:
        msg = f"max_attempts must be at least 1, got {max_attempts}"
        raise ValueError(msg)

    last_error: BaseException | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return body()
        except retry_on as e:
            last_error = e
            logger.debug("Attempt %d/%d failed: %s", attempt, max_attempts, e)
            if attempt < max_attempts:
                sleep(delay)

    assert last_error is not None
    raise RetryExhaustedError(max_attempts, last_error) from last_error
