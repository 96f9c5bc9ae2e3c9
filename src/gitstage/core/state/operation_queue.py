# -----------------------------------------------------------------------------
# /*
#  * Copyright (C) 2025 GitStage
#  *
#  * This program is free software; you can redistribute it and/or modify
#  * it under the terms of the GNU General Public License as published by
#  * the Free Software Foundation; Version 2.
#  *
#  * This program is distributed in the hope that it will be useful,
#  * but WITHOUT ANY WARRANTY; without even the implied warranty of
#  * MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
#  * GNU General Public License for more details.
#  *
#  * You should have received a copy of the GNU General Public License
#  * along with this program; if not, see <https://www.gnu.org/licenses/>.
#  */
# -----------------------------------------------------------------------------

"""
Serializes every git operation for one repository.

git takes `index.lock` for most commands, so two concurrent calls against
the same repository race and one of them fails. Everything a manager asks
of git goes through its repository's queue and runs one at a time, in the
order it was enqueued.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

T = TypeVar("T")


class GitOperationQueue:
    def __init__(self) -> None:
        # asyncio.Lock wakes waiters in FIFO order
        self._lock = asyncio.Lock()
        self._queued = 0
        self._pending_mutations = 0
        self._refresh_scheduled = False
        self._background: set[asyncio.Task] = set()

    async def enqueue(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run `operation` once every earlier operation has finished and return its result."""
        self._queued += 1
        try:
            async with self._lock:
                return await operation()
        finally:
            self._queued -= 1

    async def enqueue_mutation(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Like enqueue, but counted as a pending mutation until it finishes.

        Scheduled refreshes are suppressed while mutations are pending; the
        caller of the last mutation is expected to refresh.
        """
        self._pending_mutations += 1
        try:
            return await self.enqueue(operation)
        finally:
            self._pending_mutations -= 1

    def has_pending_mutations(self) -> bool:
        return self._pending_mutations > 0

    def is_busy(self) -> bool:
        return self._queued > 0

    def schedule_refresh(self, refresh: Callable[[], Awaitable[None]]) -> bool:
        """
        Start `refresh` in the background unless it would be redundant.

        Returns False when skipped: a mutation is pending (its caller
        refreshes when done) or a scheduled refresh has not finished yet.
        Must be called from a running event loop.
        """
        if self._pending_mutations > 0 or self._refresh_scheduled:
            return False

        self._refresh_scheduled = True
        task = asyncio.get_running_loop().create_task(self._run_scheduled(refresh))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return True

    async def _run_scheduled(self, refresh: Callable[[], Awaitable[None]]) -> None:
        try:
            await refresh()
        except Exception:
            logger.exception("Scheduled refresh failed")
        finally:
            self._refresh_scheduled = False

    async def drain(self) -> None:
        """Wait for background refreshes and everything queued before this call."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
        async with self._lock:
            pass

    def cancel_background(self) -> None:
        for task in list(self._background):
            task.cancel()
