"""
Retry utilities with exponential backoff for DevBytes.
Used around upstream API calls and storage round-trips.
"""

import asyncio
import random
import time
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from shared.app_logging.logger import get_logger
from shared.config.settings import get_settings

logger = get_logger(__name__)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_factor: float = 2.0,
        jitter: bool = True,
        retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,)
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.jitter = jitter
        self.retryable_exceptions = retryable_exceptions

    @classmethod
    def from_settings(
        cls,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,),
        jitter: bool = True,
    ) -> "RetryConfig":
        """Build a config, filling unset values from the service settings."""
        service = get_settings().service
        delay = base_delay if base_delay is not None else service.retry_delay
        return cls(
            max_retries=max_retries if max_retries is not None else service.max_retries,
            base_delay=delay,
            max_delay=delay * 10,
            backoff_factor=service.retry_backoff_factor,
            jitter=jitter,
            retryable_exceptions=retryable_exceptions,
        )


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay for retry attempt with exponential backoff and jitter."""
    delay = config.base_delay * (config.backoff_factor ** attempt)
    delay = min(delay, config.max_delay)

    if config.jitter:
        jitter_range = delay * 0.1
        delay += random.uniform(-jitter_range, jitter_range)

    return max(0, delay)


def retry(
    max_retries: Optional[int] = None,
    base_delay: Optional[float] = None,
    jitter: bool = True,
    retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,),
):
    """
    Decorator for retrying function calls with exponential backoff.

    Once retries are exhausted the last exception is re-raised unchanged,
    matching `retry_async`.

    Args:
        max_retries: Maximum number of retry attempts (settings default when None)
        base_delay: Base delay between retries in seconds (settings default when None)
        jitter: Whether to add random jitter to delays
        retryable_exceptions: Tuple of exception types to retry on

    Returns:
        Decorated function
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            config = RetryConfig.from_settings(
                max_retries=max_retries,
                base_delay=base_delay,
                retryable_exceptions=retryable_exceptions,
                jitter=jitter,
            )

            for attempt in range(config.max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except config.retryable_exceptions as e:
                    if attempt == config.max_retries:
                        logger.error(f"Function {func.__name__} failed after {config.max_retries} retries: {e}")
                        raise

                    delay = calculate_delay(attempt, config)
                    logger.warning(f"Function {func.__name__} failed (attempt {attempt + 1}/{config.max_retries + 1}): {e}. Retrying in {delay:.2f}s")
                    time.sleep(delay)

        return wrapper
    return decorator


async def retry_async(
    func: Callable[..., Awaitable[Any]],
    *args,
    config: Optional[RetryConfig] = None,
    **kwargs
) -> Any:
    """
    Await `func(*args, **kwargs)` with retry logic and exponential backoff.

    Exceptions outside `config.retryable_exceptions` propagate immediately.
    Once retries are exhausted the last exception is re-raised unchanged so
    callers can still inspect the upstream error type.
    """
    config = config or RetryConfig.from_settings()

    for attempt in range(config.max_retries + 1):
        try:
            return await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            if attempt == config.max_retries:
                logger.error(f"Async function {func.__name__} failed after {config.max_retries} retries: {e}")
                raise

            delay = calculate_delay(attempt, config)
            logger.warning(f"Async function {func.__name__} failed (attempt {attempt + 1}/{config.max_retries + 1}): {e}. Retrying in {delay:.2f}s")
            await asyncio.sleep(delay)
