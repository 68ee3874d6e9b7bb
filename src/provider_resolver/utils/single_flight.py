# src/provider_resolver/utils/single_flight.py
"""
Keyed single-flight memoization.

The first caller for a key starts the work; every caller that arrives
before it finishes awaits the same task. Successful results are kept for
the lifetime of the instance, failures are dropped so the next call runs
the work again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Share one in-flight execution (and its result) per key."""

    def __init__(self) -> None:
        self._results: dict[Hashable, T] = {}
        self._pending: dict[Hashable, asyncio.Task[T]] = {}

    async def do(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """Return the memoized result for ``key``, running ``factory`` at most once."""
        if key in self._results:
            return self._results[key]

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda t, k=key: self._settle(k, t))

        # Shielded so one caller giving up does not cancel the shared work
        return await asyncio.shield(task)

    def _settle(self, key: Hashable, task: asyncio.Task[T]) -> None:
        # A task dropped by clear() must not repopulate the cache
        if self._pending.get(key) is not task:
            return
        del self._pending[key]
        if task.cancelled():
            return
        if task.exception() is None:
            self._results[key] = task.result()
        else:
            logger.debug(f"Single-flight fill for {key!r} failed; not cached")

    def get(self, key: Hashable) -> T | None:
        """Completed result for ``key``, if any."""
        return self._results.get(key)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._results

    def __len__(self) -> int:
        return len(self._results)

    def values(self) -> list[T]:
        """Completed results, in fill order."""
        return list(self._results.values())

    def clear(self) -> None:
        """Forget all results and cancel fills still in flight."""
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()
        self._results.clear()
