from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from ..domain.errors import SideEffectError

logger = logging.getLogger(__name__)


class SideEffectRunner:
    """Fire-and-forget scheduler for audit and notification calls.

    Each call runs in its own task; a failure is logged and dropped so it
    never reaches the code that scheduled it. No retries.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def fire(self, name: str, func: Callable[..., Awaitable[Any]], *args: Any) -> None:
        task = asyncio.ensure_future(self._guard(name, func, *args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for everything scheduled so far (shutdown and tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _guard(self, name: str, func: Callable[..., Awaitable[Any]], *args: Any) -> None:
        try:
            await func(*args)
        except Exception as exc:
            error = SideEffectError(f"{name} failed: {exc}")
            logger.warning("side effect dropped: %s", error, exc_info=exc)
