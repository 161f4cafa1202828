"""Retrying reads against rate-limited integration APIs.

Slack answers a rate-limited call with 429 and a ``Retry-After`` header
(seconds); that wait is honored, capped by ``max_retry_after``. Other
transient failures back off exponentially with jitter.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})
MAX_RETRY_AFTER_SECONDS = 30.0

Sleep = Callable[[float], Awaitable[None]]


async def request_with_retries(
    request_fn: Callable[[], Awaitable[httpx.Response]],
    *,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
    retry_statuses: frozenset[int] | set[int] | None = None,
    max_retry_after: float = MAX_RETRY_AFTER_SECONDS,
    sleep: Sleep = asyncio.sleep,
) -> httpx.Response:
    """
    Run an idempotent request, retrying transport errors and retryable statuses.

    The last response is returned as-is once attempts run out; the last
    transport error is re-raised.
    """
    statuses = retry_statuses or DEFAULT_RETRY_STATUSES

    for attempt in range(1, max_attempts + 1):
        final = attempt == max_attempts
        try:
            response = await request_fn()
        except httpx.RequestError as exc:
            if final:
                raise
            delay = _backoff(attempt, base_delay, max_delay)
            logger.warning("Integration request failed (%s), retrying", type(exc).__name__)
            await _pause(sleep, delay)
            continue

        if final or response.status_code not in statuses:
            return response

        delay = retry_after_seconds(response, max_retry_after)
        if delay is None:
            delay = _backoff(attempt, base_delay, max_delay)
        logger.warning(
            "Integration request returned %s, retrying in %.1fs",
            response.status_code,
            delay,
        )
        await _pause(sleep, delay)

    raise ValueError("max_attempts must be at least 1")


def retry_after_seconds(response: httpx.Response, cap: float) -> float | None:
    """Wait requested by a 429/503 ``Retry-After`` header, or None."""
    if response.status_code not in (429, 503):
        return None
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        # HTTP-date form; Slack only sends seconds
        return None
    return min(max(seconds, 0.0), cap)


def _backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
    if delay:
        delay += random.uniform(0, delay / 2)
    return delay


async def _pause(sleep: Sleep, delay: float) -> None:
    if delay > 0:
        await sleep(delay)
