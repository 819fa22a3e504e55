"""
Backoff retry for provider and storage coroutines.
"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, Tuple, Type, TypeVar

from adgen.shared.errors import RetryableError
from adgen.shared.logging import get_logger

T = TypeVar("T")
logger = get_logger("retry")


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Delay before retry number ``attempt`` (1-based): base, 2*base, 4*base, ..."""
    return base_delay * (2 ** (attempt - 1))


def retry_with_backoff(
    max_attempts: int = 3,
    base_delay: float = 2,
    retryable_exceptions: Tuple[Type[Exception], ...] = (RetryableError,)
):
    """
    Retry a coroutine function on ``retryable_exceptions``.

    RateLimitError subclasses RetryableError and is covered by the default.
    Any other exception propagates immediately. After the last attempt the
    final error is re-raised unchanged.

    Example:
        @retry_with_backoff(max_attempts=3, base_delay=2)
        async def upload():
            ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        name = func.__name__

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except retryable_exceptions as e:
                    if attempt >= max_attempts:
                        logger.error(
                            f"All {max_attempts} retry attempts failed for {name}",
                            extra={"error": str(e)}
                        )
                        raise
                    delay = backoff_delay(base_delay, attempt)
                    logger.warning(
                        f"Retry attempt {attempt}/{max_attempts} for {name} after {delay}s delay",
                        extra={"error": str(e), "attempt": attempt}
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator
