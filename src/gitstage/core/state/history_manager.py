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

from dataclasses import dataclass

from loguru import logger

from gitstage.constants import DEFAULT_HISTORY_COUNT
from gitstage.core.data.diff import DiffResult
from gitstage.core.data.history import CommitInfo
from gitstage.core.diff.diff_parser import parse_diff
from gitstage.core.exceptions import GitStageError
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.state.observable import ObservableState
from gitstage.core.state.operation_queue import GitOperationQueue


@dataclass(frozen=True)
class HistoryState:
    commits: tuple[CommitInfo, ...] = ()
    selected_commit: CommitInfo | None = None
    commit_diff: DiffResult | None = None
    is_loaded: bool = False
    is_loading: bool = False
    error: str | None = None


class HistoryManager(ObservableState[HistoryState]):
    """Commit log for the history view plus the diff of the selected commit."""

    def __init__(
        self,
        commands: GitCommands,
        queue: GitOperationQueue,
        count: int = DEFAULT_HISTORY_COUNT,
    ) -> None:
        super().__init__(HistoryState())
        self.commands = commands
        self.queue = queue
        self.count = count

    async def load_history(self, count: int | None = None) -> None:
        if count is not None:
            self.count = count

        self._update(is_loading=True, error=None)
        commits = await self.queue.enqueue(lambda: self.commands.log(self.count))
        self._update(
            commits=tuple(commits),
            selected_commit=None,
            commit_diff=None,
            is_loaded=True,
            is_loading=False,
        )

    async def refresh_if_loaded(self) -> None:
        if self.state.is_loaded:
            await self.load_history()

    async def select_commit(self, commit: CommitInfo | None) -> None:
        self._update(selected_commit=commit, commit_diff=None)
        if commit is None:
            return

        try:
            raw = await self.queue.enqueue(lambda: self.commands.commit_diff(commit.hash))
        except GitStageError as e:
            logger.error(f"Failed to load commit diff for {commit.short_hash}: {e.message}")
            if self.state.selected_commit is commit:
                self._update(error=f"Failed to load commit diff: {e.message}")
            return

        if self.state.selected_commit is commit:
            self._update(commit_diff=parse_diff(raw))

    async def get_head_commit_message(self) -> str:
        return await self.queue.enqueue(self.commands.head_message)
