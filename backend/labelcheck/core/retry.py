"""
Bounded retry with exponential backoff.

Callers decide which failures are transient through a predicate; any
other exception, or the last transient one, propagates unchanged.
"""

from typing import Callable, Optional, TypeVar
import logging
import time

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    func: Callable[[], T],
    *,
    is_retryable: Callable[[BaseException], bool],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    exponential_base: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    description: Optional[str] = None
) -> T:
    """
    Call func until it succeeds, fails with a non-retryable error, or
    max_attempts is used up.

    Args:
        func: Zero-argument callable to invoke
        is_retryable: Decides whether an exception is worth another attempt
        max_attempts: Total number of attempts (not retries)
        base_delay: Delay before the second attempt, in seconds
        exponential_base: Growth factor of the delay between attempts
        sleep: Injected for tests
        description: Name used in log lines

    Returns:
        Whatever func returns
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    name = description or getattr(func, "__name__", "call")

    for attempt in range(max_attempts):
        try:
            return func()
        except Exception as e:
            retryable = is_retryable(e)
            logger.warning(
                f"{name} attempt {attempt + 1}/{max_attempts} failed "
                f"({type(e).__name__}: {e}); retryable={retryable}"
            )
            if not retryable or attempt == max_attempts - 1:
                raise

            delay = base_delay * (exponential_base ** attempt)
            sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"{name} exhausted its retries")


