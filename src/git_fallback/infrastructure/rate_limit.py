"""Rate-limit-aware retry combinator shared by every remote call.

A rate-limited call sleeps until the server's reset time plus a fixed safety
margin and is then re-issued unchanged.  There is no cap on the number of
retries: a server that keeps answering "rate limited" keeps the process
waiting.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, TypeVar

from git_fallback.domain.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MARGIN_SECONDS = 30.0

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


def compute_wait(reset_at: float, now: float, margin: float = DEFAULT_MARGIN_SECONDS) -> float:
    """Seconds to sleep before retrying: ``reset_at - now + margin``, never negative."""
    return max(reset_at - now + margin, 0.0)


async def retry_on_rate_limit(
    operation: str,
    call: Callable[[], Awaitable[T]],
    *,
    margin: float = DEFAULT_MARGIN_SECONDS,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = time.time,
) -> T:
    """Await ``call()`` until it completes without :class:`RateLimitedError`.

    Every other exception propagates on the first occurrence.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await call()
        except RateLimitedError as exc:
            wait = compute_wait(exc.reset_at, clock(), margin)
            logger.warning(
                "%s rate limited (attempt %d), sleeping %.0fs before retrying",
                operation,
                attempt,
                wait,
            )
            await sleep(wait)
