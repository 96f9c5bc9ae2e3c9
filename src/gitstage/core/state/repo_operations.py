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

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger

from gitstage.core.data.status import LocalBranch
from gitstage.core.exceptions import GitStageError
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.state.observable import ObservableState
from gitstage.core.state.operation_queue import GitOperationQueue


@dataclass(frozen=True)
class RepoOperationState:
    operation: str | None = None
    in_progress: bool = False
    error: str | None = None
    last_result: str | None = None


@dataclass
class RepoOperationCallbacks:
    refresh: Callable[[], Awaitable[None]]
    load_stash_list: Callable[[], Awaitable[None]]
    reset_compare_base_branch: Callable[[], None]


class RepoOperationManager(ObservableState[RepoOperationState]):
    """
    Remote, stash, branch and undo operations.

    Only one runs at a time; a request made while another is in progress is
    ignored and returns False.
    """

    def __init__(
        self,
        commands: GitCommands,
        queue: GitOperationQueue,
        callbacks: RepoOperationCallbacks,
    ) -> None:
        super().__init__(RepoOperationState())
        self.commands = commands
        self.queue = queue
        self.callbacks = callbacks

    async def _run(self, operation: str, fn: Callable[[], Awaitable[str]]) -> bool:
        if self.state.in_progress:
            logger.warning(f"Ignoring {operation}: {self.state.operation} still running")
            return False

        self._update(operation=operation, in_progress=True, error=None, last_result=None)
        try:
            result = await self.queue.enqueue_mutation(fn)
        except GitStageError as e:
            logger.error(f"{operation} failed: {e.message}")
            self._update(in_progress=False, error=e.message)
            return False

        self._update(in_progress=False, last_result=result)
        await self.callbacks.refresh()
        return True

    def clear(self) -> None:
        self._update(operation=None, error=None, last_result=None)

    async def push(self) -> bool:
        return await self._run("push", self.commands.push)

    async def fetch(self) -> bool:
        return await self._run("fetch", self.commands.fetch)

    async def pull_rebase(self) -> bool:
        return await self._run("pull", self.commands.pull_rebase)

    async def stash(self, message: str | None = None) -> bool:
        ok = await self._run("stash", lambda: self.commands.stash_save(message))
        await self.callbacks.load_stash_list()
        return ok

    async def stash_pop(self, index: int = 0) -> bool:
        ok = await self._run("stashPop", lambda: self.commands.stash_pop(index))
        await self.callbacks.load_stash_list()
        return ok

    async def get_local_branches(self) -> list[LocalBranch]:
        return await self.queue.enqueue(self.commands.local_branches)

    async def switch_branch(self, name: str) -> bool:
        ok = await self._run("branchSwitch", lambda: self.commands.switch_branch(name))
        self.callbacks.reset_compare_base_branch()
        return ok

    async def create_branch(self, name: str) -> bool:
        ok = await self._run("branchCreate", lambda: self.commands.create_branch(name))
        self.callbacks.reset_compare_base_branch()
        return ok

    async def soft_reset(self, count: int = 1) -> bool:
        return await self._run("softReset", lambda: self.commands.soft_reset(count))

    async def cherry_pick(self, commit_hash: str) -> bool:
        return await self._run("cherryPick", lambda: self.commands.cherry_pick(commit_hash))

    async def revert(self, commit_hash: str) -> bool:
        return await self._run("revert", lambda: self.commands.revert(commit_hash))
