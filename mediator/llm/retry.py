"""
Retry Logic with Exponential Backoff

Retry policy for content-generation providers. Transient provider errors
(rate limits, timeouts, network failures) are retried with exponential
backoff; permanent errors propagate immediately. The mediation core never
retries on its own, so this decorator is the only retry layer.
"""

import time
import logging
from functools import wraps
from typing import Callable, Optional, Type, Tuple

from mediator.llm.errors import (
    RateLimitError,
    TimeoutError,
    NetworkError,
    AuthenticationError,
    InvalidRequestError,
)


logger = logging.getLogger(__name__)


TRANSIENT_ERRORS = (
    RateLimitError,
    TimeoutError,
    NetworkError,
)

PERMANENT_ERRORS = (
    AuthenticationError,
    InvalidRequestError,
)


def is_transient_error(error: Exception) -> bool:
    """Return True if the error should be retried."""
    return isinstance(error, TRANSIENT_ERRORS)


def calculate_backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Exponential backoff delay: ``base_delay * 2 ** attempt``.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds

    Returns:
        Delay in seconds
    """
    return base_delay * (2 ** attempt)


def retry_with_backoff(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    transient_errors: Tuple[Type[Exception], ...] = TRANSIENT_ERRORS,
    permanent_errors: Tuple[Type[Exception], ...] = PERMANENT_ERRORS,
    sleep: Optional[Callable[[float], None]] = None,
):
    """Decorator retrying a provider call on transient errors.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        base_delay: Base delay for exponential backoff in seconds
        transient_errors: Exception types that trigger a retry
        permanent_errors: Exception types raised without retry
        sleep: Sleep function (default: time.sleep)

    Example:
        >>> @retry_with_backoff(max_attempts=3, base_delay=1.0)
        ... def generate(self, request):
        ...     ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)

                except permanent_errors as e:
                    logger.error(
                        f"Permanent error in {func.__name__}: {type(e).__name__}: {e}"
                    )
                    raise

                except transient_errors as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        delay = calculate_backoff_delay(attempt, base_delay)
                        logger.warning(
                            f"Transient error in {func.__name__} "
                            f"(attempt {attempt + 1}/{max_attempts}): "
                            f"{type(e).__name__}: {e}. Retrying in {delay}s..."
                        )
                        (sleep or time.sleep)(delay)
                    else:
                        logger.error(
                            f"All {max_attempts} attempts failed for {func.__name__}: "
                            f"{type(e).__name__}: {e}"
                        )

            raise last_exception

        return wrapper
    return decorator
