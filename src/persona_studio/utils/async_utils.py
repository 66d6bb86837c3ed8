"""Run coroutines from synchronous entry points (Celery tasks, CLI commands)."""

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")

_worker_loop: asyncio.AbstractEventLoop | None = None


def worker_loop() -> asyncio.AbstractEventLoop:
    """The event loop shared by every sync-to-async call in this process.

    One loop is kept for the life of the worker because httpx and fal_client
    cache clients bound to the loop they were first used on.
    """
    global _worker_loop
    if _worker_loop is None or _worker_loop.is_closed():
        _worker_loop = asyncio.new_event_loop()
    return _worker_loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Drive ``coro`` to completion on the worker loop.

    Must not be called while an event loop is already running in this thread.
    """
    loop = worker_loop()
    asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)
