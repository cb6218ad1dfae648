"""
Retry utility with linear backoff for transient classification failures.

Any exception raised by the wrapped call counts as transient: LLM
transport errors, empty responses and malformed JSON all get another
attempt until the budget is spent.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from cookiecare.utils import errors, logger

log = logger.create_logger("Retry")

T = TypeVar("T")


def backoff_delay_ms(attempt: int, base_delay_ms: int) -> int:
    """Delay before the retry following the zero-based *attempt*.

    The wait grows with the attempt number: ``base``, ``2 × base``, ...
    """
    return base_delay_ms * (attempt + 1)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 2,
    base_delay_ms: int = 1500,
    context: str | None = None,
) -> T:
    """
    Execute an async function, retrying up to *max_retries* extra times.

    Raises the last error once every attempt has failed.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn()
        except asyncio.CancelledError:
            raise
        except Exception as error:
            log.warn(
                f"Attempt {attempt + 1}/{max_retries + 1} failed",
                {
                    "context": context,
                    "error": errors.get_error_message(error)[:200],
                },
            )
            if attempt >= max_retries:
                log.error(
                    "All retry attempts exhausted",
                    {"context": context, "attempts": attempt + 1},
                )
                raise

            await asyncio.sleep(backoff_delay_ms(attempt, base_delay_ms) / 1000)

    # Unreachable: the final attempt either returns or raises.
    raise RuntimeError(f"Retry loop exited without a result ({context})")
