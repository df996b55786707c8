"""
Retry helper for idempotent backend reads.

Only safe, repeatable calls go through here. Side-effecting calls such
as activation are sent exactly once by their clients.
"""

import asyncio
import functools
import random
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from shared.logging import get_logger


class RetryConfig:
    """Exponential backoff settings."""

    def __init__(self,
                 max_attempts: int = 3,
                 base_delay: float = 0.5,
                 max_delay: float = 5.0,
                 exponential_base: float = 2.0,
                 jitter: bool = True):
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (1-based)."""
        delay = min(self.base_delay * (self.exponential_base ** (attempt - 1)), self.max_delay)
        if self.jitter:
            delay += random.uniform(-delay * 0.1, delay * 0.1)
        return max(0.0, delay)


class RetryError(Exception):
    """All attempts failed; carries the last underlying exception."""

    def __init__(self, message: str, last_exception: BaseException, attempts: int):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


def retry_on_exception(exceptions: Tuple[Type[BaseException], ...] = (Exception,),
                       config: Optional[RetryConfig] = None,
                       logger: Any = None) -> Callable:
    """Retry an async callable on the given exceptions.

    Attempts are logged through ``logger`` when one is given, so retries
    show up with the caller's bound context (backend path and so on).
    """
    config = config or RetryConfig()

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        log = logger or get_logger(f"retry.{func.__name__}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            for attempt in range(1, config.max_attempts + 1):
                try:
                    result = await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == config.max_attempts:
                        log.warning(
                            "Giving up after retries",
                            attempts=attempt,
                            error=str(e)
                        )
                        raise RetryError(
                            f"{func.__name__} failed after {attempt} attempts",
                            last_exception=e,
                            attempts=attempt
                        )

                    delay = config.delay_for(attempt)
                    log.info(
                        "Retrying after failure",
                        attempt=attempt,
                        max_attempts=config.max_attempts,
                        delay=round(delay, 3),
                        error=str(e)
                    )
                    await asyncio.sleep(delay)
                    continue

                if attempt > 1:
                    log.info("Succeeded after retry", attempt=attempt)
                return result

        return wrapper

    return decorator
