"""Connection stability utilities with retry logic."""
import asyncio
import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import paramiko
from ncclient.operations.errors import TimeoutExpiredError
from ncclient.transport.errors import TransportError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    wait_incrementing,
    retry_if_exception_type,
    before_sleep_log,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Network and SSH exceptions worth a new attempt
RETRYABLE_EXCEPTIONS = (
    ConnectionRefusedError,
    ConnectionResetError,
    TimeoutError,
    OSError,
    EOFError,
    paramiko.SSHException,
    TransportError,
    TimeoutExpiredError,
)


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
    increment: Optional[float] = None,
) -> Callable:
    """Decorator factory for retry logic.

    Waits grow exponentially between ``min_wait`` and ``max_wait``. When
    ``increment`` is given the wait grows linearly instead: ``min_wait``,
    then ``min_wait + increment`` and so on, capped at ``max_wait``.

    Args:
        max_attempts: Maximum number of attempts
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)
        exceptions: Tuple of exception types to retry on
        increment: Linear wait increment (seconds), disables exponential backoff
    """
    if increment is None:
        wait = wait_exponential(multiplier=1, min=min_wait, max=max_wait)
    else:
        wait = wait_incrementing(start=min_wait, increment=increment, max=max_wait)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait,
            retry=retry_if_exception_type(exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            return await func(*args, **kwargs)  # type: ignore[misc]

        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait,
            retry=retry_if_exception_type(exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            return func(*args, **kwargs)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper

    return decorator
