"""At-most-once asynchronous computation cell."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class Once(Generic[T]):
    """Start *factory* on the first ``get()`` and replay its outcome afterwards.

    Both results and exceptions are stored; later callers never trigger a
    second computation.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._task: asyncio.Future[T] | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    async def get(self) -> T:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        # A caller being cancelled must not cancel the shared computation.
        return await asyncio.shield(self._task)
