"""Bounded retry with exponential backoff for collaborator calls.

Usage:
    from libs.common.retry import RetryPolicy, retry_async

    policy = RetryPolicy(max_attempts=3, base_delay=0.2)
    row = await retry_async(lambda: fetch(), policy=policy, retry_on=(OperationalError,))
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from libs.common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 5.0

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry that follows ``attempt`` (1-based)."""
        # Exponential backoff capped at max_delay.
        return min(self.max_delay, self.base_delay * (2 ** max(attempt - 1, 0)))


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    retry_on: Tuple[Type[BaseException], ...],
    label: str = "operation",
) -> T:
    """Run ``operation`` until it succeeds or ``policy.max_attempts`` is reached.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates immediately. The last retryable error is re-raised once the
    attempts are exhausted.
    """
    attempts = max(policy.max_attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as exc:
            if attempt >= attempts:
                logger.error("%s failed after %d attempts: %s", label, attempt, exc)
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.2fs: %s",
                label,
                attempt,
                attempts,
                delay,
                exc,
            )
            await asyncio.sleep(delay)
    raise RuntimeError("unreachable")  # pragma: no cover
