"""
Async retry with exponential backoff for remote vector-store calls.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from foodrag.errors import RetryExhaustedError

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SEC = 1.0

logger = logging.getLogger(__name__)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    attempts: int = DEFAULT_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY_SEC,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "operation",
) -> T:
    """
    Run `operation` up to `attempts` times, sleeping base_delay * 2**(n-1)
    after the n-th failure. Raises RetryExhaustedError chained from the last error.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")

    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            last_error = exc
            logger.warning(
                "Attempt failed",
                extra={"operation": description, "attempt": attempt, "error": str(exc)},
            )
            if attempt < attempts:
                delay = base_delay * (2 ** (attempt - 1))
                logger.info("Retrying", extra={"operation": description, "delay_sec": delay})
                await sleep(delay)

    raise RetryExhaustedError(attempts, last_error) from last_error


__all__ = ["with_retry", "DEFAULT_ATTEMPTS", "DEFAULT_BASE_DELAY_SEC"]
