"""Bridge from sync request handlers to the loop that owns the HTTP client."""

from __future__ import annotations

import asyncio
from typing import Coroutine, TypeVar

import anyio

T = TypeVar("T")


def run_async(coro: Coroutine[object, object, T], *, timeout: float | None = None) -> T:
    """
    Await ``coro`` from synchronous code.

    Sync endpoints run in AnyIO worker threads; their coroutines are handed
    back to the app's event loop, where the pooled Slack/Cloudinary client
    lives. Outside a worker thread (CLI, plain scripts) a private loop is
    started instead.

    Raises:
        RuntimeError: Called from code already running on an event loop
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        coro.close()
        raise RuntimeError("run_async called from async context; use await instead")

    started = False

    async def _runner() -> T:
        nonlocal started
        started = True
        if timeout is None:
            return await coro
        with anyio.fail_after(timeout):
            return await coro

    try:
        return anyio.from_thread.run(_runner)
    except RuntimeError:
        # Errors raised by the coroutine itself propagate unchanged
        if started:
            raise
    return anyio.run(_runner)
