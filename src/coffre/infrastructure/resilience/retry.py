"""
Retry with exponential backoff and jitter.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from coffre.infrastructure.monitoring.logger import get_logger
from coffre.infrastructure.resilience.exceptions import RetryError

logger = get_logger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    """Maximum number of attempts (including the first one)"""

    initial_delay: float = 0.5
    """Delay before the first retry in seconds"""

    max_delay: float = 5.0
    """Upper bound for any single delay in seconds"""

    backoff_multiplier: float = 2.0
    """Exponential growth factor"""

    jitter_factor: float = 0.1
    """Random +/- share of each delay (0.0 disables jitter)"""

    retry_on: tuple = (Exception,)
    """Exception types worth retrying"""


class Retry:
    """
    Async retry handler.

    Example:
        retry = Retry(RetryConfig(max_attempts=5, retry_on=(aiohttp.ClientError,)))
        data = await retry.execute(fetch_data, url)
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """
        Delay before retry number attempt + 1.

        Args:
            attempt: Failed attempt number (0-indexed)
        """
        delay = self.config.initial_delay * (self.config.backoff_multiplier**attempt)
        delay = min(delay, self.config.max_delay)

        if self.config.jitter_factor > 0:
            jitter_range = delay * self.config.jitter_factor
            delay = max(0.0, delay + random.uniform(-jitter_range, jitter_range))

        return delay

    async def execute(
        self, func: Callable[..., Awaitable[Any]], *args, **kwargs
    ) -> Any:
        """
        Await func, retrying on configured exceptions.

        Exceptions outside retry_on propagate immediately.

        Raises:
            RetryError: When all attempts are exhausted
        """
        last_exception: Optional[Exception] = None

        for attempt in range(self.config.max_attempts):
            try:
                return await func(*args, **kwargs)
            except self.config.retry_on as e:
                last_exception = e
                if attempt == self.config.max_attempts - 1:
                    break

                delay = self.calculate_delay(attempt)
                logger.warning(
                    f"Attempt {attempt + 1}/{self.config.max_attempts} failed: "
                    f"{e}. Retrying in {delay:.2f}s..."
                )
                await self._sleep(delay)

        raise RetryError(
            f"All {self.config.max_attempts} attempts exhausted: {last_exception}",
            attempts=self.config.max_attempts,
            last_exception=last_exception,
        )
