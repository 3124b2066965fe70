"""Bounded exponential-backoff retries around one simulated attempt."""

import asyncio
from typing import Awaitable, Callable, TypeVar

from simpay.common.errors import PaymentError
from simpay.common.logging import logger
from simpay.common.metrics import retries_total
from simpay.services.processor.schemas import RetryPolicy

T = TypeVar("T")


def backoff_seconds(policy: RetryPolicy, attempt_index: int) -> float:
    """Delay after the failed attempt `attempt_index` (0-based)."""

    return policy.backoff_ms * (2**attempt_index) / 1000.0


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    operation_name: str = "",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run `operation` up to `policy.max_retries` times.

    The last error is re-raised unchanged. Non-retryable payment errors are
    raised on first occurrence.
    """

    last_error: Exception | None = None
    for attempt in range(policy.max_retries):
        try:
            return await operation()
        except PaymentError as exc:
            if not exc.retryable:
                raise
            last_error = exc
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            last_error = exc
        if attempt < policy.max_retries - 1:
            delay = backoff_seconds(policy, attempt)
            retries_total.labels(operation=operation_name).inc()
            logger.warning(
                "attempt failed operation=%s attempt=%s error=%r backoff_s=%s",
                operation_name,
                attempt + 1,
                last_error,
                delay,
            )
            await sleep(delay)

    logger.error(
        "retries exhausted operation=%s attempts=%s error=%r",
        operation_name,
        policy.max_retries,
        last_error,
    )
    raise last_error
