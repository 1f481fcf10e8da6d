import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from ..exceptions import AIServiceError, TransientProviderError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """
    Bounded sequential retry with exponential backoff.

    Rate-limit/overload failures (TransientProviderError) wait
    ``base_delay * 2**attempt`` plus up to ``jitter_ms`` of random jitter.
    Every other failure is retried as well, waiting ``base_delay * 2**attempt``
    without jitter, except on the final attempt where it is re-raised as is.
    When the budget runs out on transient failures an AIServiceError carrying
    the attempt count and the last error is raised.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay_ms: int = 1000,
        jitter_ms: int = 1000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        random_fn: Callable[[float, float], float] = random.uniform,
    ):
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.jitter_ms = jitter_ms
        self._sleep = sleep
        self._random = random_fn

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: Optional[int] = None,
        base_delay_ms: Optional[int] = None,
    ) -> T:
        attempts = max_attempts or self.max_attempts
        base_delay = self.base_delay_ms if base_delay_ms is None else base_delay_ms
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                is_last = attempt == attempts - 1
                backoff = base_delay * (2 ** attempt)

                if isinstance(e, TransientProviderError):
                    if is_last:
                        break
                    delay = backoff + self._random(0, self.jitter_ms)
                    logger.warning(
                        "provider_overloaded_retrying",
                        attempt=attempt + 1,
                        max_attempts=attempts,
                        status=e.status,
                        delay_ms=round(delay),
                    )
                elif is_last:
                    logger.error("retry_attempts_exhausted", attempts=attempts, error=str(e))
                    raise
                else:
                    # Non-retryable failures are retried too, without jitter
                    delay = backoff
                    logger.warning(
                        "provider_call_failed_retrying",
                        attempt=attempt + 1,
                        max_attempts=attempts,
                        error=str(e),
                        delay_ms=delay,
                    )

                await self._sleep(delay / 1000)

        error_info = str(last_error) if last_error else "Unknown error"
        logger.error("retry_attempts_exhausted", attempts=attempts, error=error_info)
        raise AIServiceError(f"AI service failed after {attempts} retry attempts: {error_info}")
