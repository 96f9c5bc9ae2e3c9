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

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from gitstage.constants import DEFAULT_CHECK_IGNORE_BATCH_SIZE, NOT_A_REPOSITORY
from gitstage.core.data.diff import DiffResult
from gitstage.core.data.status import (
    FileDiffs,
    FileEntry,
    HunkCount,
    RepoStatus,
    StashEntry,
)
from gitstage.core.diff.diff_parser import DiffParser, parse_diff
from gitstage.core.exceptions import GitStageError, nothing_to_commit
from gitstage.core.git_commands.git_commands import (
    GitCommands,
    decode_patch,
    looks_binary,
)
from gitstage.core.logging.utils import time_block
from gitstage.core.state.observable import ObservableState
from gitstage.core.state.operation_queue import GitOperationQueue


class DiffState(str, Enum):
    """Loading state of the selected file's diff."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class WorkingTreeState:
    status: RepoStatus | None = None
    selected_file: FileEntry | None = None
    # the side of file_diffs matching selected_file.staged
    diff: DiffResult | None = None
    file_diffs: FileDiffs | None = None
    diff_state: DiffState = DiffState.IDLE
    hunk_counts: dict[str, HunkCount] = field(default_factory=dict)
    is_loading: bool = False
    error: str | None = None
    stash_list: tuple[StashEntry, ...] = ()


def _parse_or_empty(raw: str) -> DiffResult:
    return parse_diff(raw) if raw else DiffResult.empty()


def merge_hunk_counts(unstaged_raw: str, staged_raw: str) -> dict[str, HunkCount]:
    unstaged = DiffParser.count_hunks_per_file(unstaged_raw)
    staged = DiffParser.count_hunks_per_file(staged_raw)
    return {
        path: HunkCount(staged=staged.get(path, 0), unstaged=unstaged.get(path, 0))
        for path in unstaged.keys() | staged.keys()
    }


def resolve_selection(files, selected: FileEntry | None) -> FileEntry | None:
    """Find the refreshed counterpart of `selected`: same path and side, else same path."""
    if selected is None:
        return None
    for entry in files:
        if entry.key == selected.key:
            return entry
    for entry in files:
        if entry.path == selected.path:
            return entry
    return None


class WorkingTreeManager(ObservableState[WorkingTreeState]):
    """
    Status, diffs and index mutations for one working tree.

    Every git call runs through the repository's GitOperationQueue. Public
    methods never raise for git failures: they return False and leave the
    message in `state.error`.
    """

    def __init__(
        self,
        commands: GitCommands,
        queue: GitOperationQueue,
        check_ignore_batch_size: int = DEFAULT_CHECK_IGNORE_BATCH_SIZE,
    ) -> None:
        super().__init__(WorkingTreeState())
        self.commands = commands
        self.queue = queue
        self.check_ignore_batch_size = check_ignore_batch_size
        self._refresh_hooks: list[Callable[[], Awaitable[None]]] = []

    @property
    def staged_count(self) -> int:
        status = self.state.status
        return status.staged_count if status is not None else 0

    @property
    def hunk_counts(self) -> dict[str, HunkCount]:
        return self.state.hunk_counts

    def add_refresh_hook(self, hook: Callable[[], Awaitable[None]]) -> None:
        """Run `hook` after every completed refresh, outside the queue."""
        self._refresh_hooks.append(hook)

    # -----------------------------------------------------------------
    # refresh
    # -----------------------------------------------------------------

    async def refresh(self) -> None:
        await self.queue.enqueue(self._do_refresh)
        for hook in self._refresh_hooks:
            await hook()

    def schedule_refresh(self) -> bool:
        return self.queue.schedule_refresh(self.refresh)

    async def _do_refresh(self) -> None:
        self._update(is_loading=True, error=None)

        with time_block(f"refresh {self.commands.repo_path}"):
            try:
                status = await self.commands.status(self.check_ignore_batch_size)
                if not status.is_repo:
                    self._update(
                        status=status,
                        selected_file=None,
                        diff=None,
                        file_diffs=None,
                        diff_state=DiffState.IDLE,
                        hunk_counts={},
                        is_loading=False,
                        error=NOT_A_REPOSITORY,
                    )
                    return

                unstaged_raw, staged_raw = await asyncio.gather(
                    self.commands.diff(), self.commands.diff(staged=True)
                )

                captured = self.state.selected_file
                selected = resolve_selection(status.files, captured)
                file_diffs = (
                    await self._load_file_diffs(selected) if selected is not None else None
                )
            except (GitStageError, OSError) as e:
                message = e.message if isinstance(e, GitStageError) else str(e)
                logger.error(f"Refresh failed: {message}")
                self._update(is_loading=False, error=message)
                return

        hunk_counts = merge_hunk_counts(unstaged_raw, staged_raw)
        if self.state.selected_file is not captured:
            # a newer select_file ran while this refresh was loading, its own
            # diff load is queued behind us and owns the selection fields
            logger.debug("Selection changed during refresh, keeping it")
            self._update(status=status, hunk_counts=hunk_counts, is_loading=False)
            return

        self._update(
            status=status,
            selected_file=selected,
            file_diffs=file_diffs,
            diff=_display_side(selected, file_diffs),
            diff_state=DiffState.READY if selected is not None else DiffState.IDLE,
            hunk_counts=hunk_counts,
            is_loading=False,
        )

    async def _load_file_diffs(self, entry: FileEntry) -> FileDiffs:
        if entry.is_untracked:
            data = await self.commands.read_worktree_file(entry.path)
            if looks_binary(data):
                synthesized = DiffParser.synthesize_binary_diff(entry.path)
            else:
                synthesized = DiffParser.synthesize_untracked_diff(
                    entry.path, decode_patch(data)
                )
            return FileDiffs(unstaged=parse_diff(synthesized), staged=DiffResult.empty())

        unstaged_raw, staged_raw = await asyncio.gather(
            self.commands.diff(entry.path), self.commands.diff(entry.path, staged=True)
        )
        return FileDiffs(
            unstaged=_parse_or_empty(unstaged_raw), staged=_parse_or_empty(staged_raw)
        )

    async def full_diff(self, staged: bool = False) -> DiffResult:
        """The whole unstaged (or staged) diff of the repository, parsed."""
        raw = await self.queue.enqueue(lambda: self.commands.diff(staged=staged))
        return _parse_or_empty(raw)

    # -----------------------------------------------------------------
    # selection
    # -----------------------------------------------------------------

    async def select_file(self, entry: FileEntry | None) -> None:
        """
        Select `entry` and load its diffs.

        A response that arrives after the selection moved on is dropped,
        so the last selection always wins.
        """
        if entry is None:
            self._update(
                selected_file=None, diff=None, file_diffs=None, diff_state=DiffState.IDLE
            )
            return

        self._update(selected_file=entry, diff_state=DiffState.LOADING)
        try:
            file_diffs = await self.queue.enqueue(lambda: self._load_file_diffs(entry))
        except (GitStageError, OSError) as e:
            message = e.message if isinstance(e, GitStageError) else str(e)
            if self.state.selected_file is entry:
                self._update(
                    diff=None,
                    file_diffs=None,
                    diff_state=DiffState.ERROR,
                    error=f"Failed to load diff: {message}",
                )
            return

        if self.state.selected_file is not entry:
            logger.debug(f"Dropping stale diff for {entry.path}")
            return

        self._update(
            file_diffs=file_diffs,
            diff=_display_side(entry, file_diffs),
            diff_state=DiffState.READY,
        )

    # -----------------------------------------------------------------
    # mutations
    # -----------------------------------------------------------------

    async def _mutate(self, description: str, operation: Callable[[], Awaitable]) -> bool:
        try:
            await self.queue.enqueue_mutation(operation)
        except GitStageError as e:
            logger.error(f"Failed to {description}: {e.message}")
            # show the real state of the index before reporting
            await self.refresh()
            self._update(error=f"Failed to {description}: {e.message}")
            return False

        if not self.queue.has_pending_mutations():
            await self.refresh()
        return True

    async def stage(self, entry: FileEntry) -> bool:
        return await self._mutate(
            f"stage {entry.path}", lambda: self.commands.add([entry.path])
        )

    async def unstage(self, entry: FileEntry) -> bool:
        paths = [entry.path]
        if entry.original_path:
            paths.append(entry.original_path)
        return await self._mutate(
            f"unstage {entry.path}", lambda: self.commands.reset(paths)
        )

    async def stage_all(self) -> bool:
        return await self._mutate("stage all", self.commands.add_all)

    async def unstage_all(self) -> bool:
        return await self._mutate("unstage all", self.commands.reset)

    async def discard(self, entry: FileEntry) -> bool:
        """Throw away unstaged changes to a tracked file. Staged and untracked entries are refused."""
        if entry.staged or entry.is_untracked:
            logger.warning(f"Refusing to discard {entry.path}: only unstaged changes to tracked files can be discarded")
            return False
        return await self._mutate(
            f"discard {entry.path}", lambda: self.commands.checkout([entry.path])
        )

    async def stage_hunk(self, patch: str) -> bool:
        return await self._mutate(
            "stage hunk", lambda: self.commands.apply_patch(patch, cached=True)
        )

    async def unstage_hunk(self, patch: str) -> bool:
        return await self._mutate(
            "unstage hunk",
            lambda: self.commands.apply_patch(patch, cached=True, reverse=True),
        )

    async def commit(self, message: str, amend: bool = False) -> bool:
        if not message.strip():
            self._update(error="Commit message cannot be empty")
            return False
        if not amend and self.staged_count == 0:
            self._update(error=nothing_to_commit().message)
            return False
        return await self._mutate(
            "commit", lambda: self.commands.commit(message, amend=amend)
        )

    async def load_stash_list(self) -> None:
        stash_list = await self.queue.enqueue(self.commands.stash_list)
        self._update(stash_list=tuple(stash_list))


def _display_side(entry: FileEntry | None, file_diffs: FileDiffs | None) -> DiffResult | None:
    if entry is None or file_diffs is None:
        return None
    return file_diffs.staged if entry.staged else file_diffs.unstaged
