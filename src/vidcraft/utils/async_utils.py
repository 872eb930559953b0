"""Bridge between Celery's synchronous tasks and the async services."""

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")

_loop: asyncio.AbstractEventLoop | None = None


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from synchronous code.

    The worker process keeps one event loop for its lifetime. httpx clients
    created inside a task are bound to that loop, so it is reused rather than
    closed between tasks.

    Raises:
        RuntimeError: If called from a thread that already runs a loop
    """
    global _loop

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        coro.close()
        raise RuntimeError("run_async() cannot be called from a running event loop")

    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop.run_until_complete(coro)
