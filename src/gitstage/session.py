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
Headless staging session.

Owns the manager registry, the current repository, the highlighted file
and hunk, and the selection reconciliation that keeps the highlight on a
sensible row after the file list changes. The control socket drives it
through `handle_command`.
"""

import asyncio
from pathlib import Path

from loguru import logger

from gitstage.context import GitStageConfig
from gitstage.core.data.diff import DiffLineKind
from gitstage.core.exceptions import ValidationError
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.git_interface.SubprocessGitInterface import (
    SubprocessGitInterface,
)
from gitstage.core.selection.file_categories import (
    categorize_files,
    file_at_index,
    resolve_anchor,
    section_counts,
)
from gitstage.core.selection.staging_operations import StagingOperations
from gitstage.core.state.git_state_manager import (
    GitStateManager,
    RepoManagerRegistry,
    normalize_repo_path,
)
from gitstage.core.state.working_tree import WorkingTreeState
from gitstage.core.watcher.follow_mode import FollowMode, FollowState, expand_path
from gitstage.ipc.commands import (
    Command,
    CommitCommand,
    GetStateCommand,
    NavigateDownCommand,
    NavigateUpCommand,
    QuitCommand,
    RefreshCommand,
    SelectCommand,
    StageAllCommand,
    StageCommand,
    ToggleCommand,
    ToggleHunkCommand,
    UnstageAllCommand,
    UnstageCommand,
    failure,
    success,
)


async def find_repo_root(path: Path) -> Path | None:
    """Top level of the working tree containing `path` (a file or a directory)."""
    start = path if path.is_dir() else path.parent
    if not start.is_dir():
        return None
    return await GitCommands(SubprocessGitInterface(start)).toplevel()


class StagingSession:
    def __init__(
        self,
        repo_path: str | Path,
        config: GitStageConfig | None = None,
        registry: RepoManagerRegistry | None = None,
    ) -> None:
        self.config = config if config is not None else GitStageConfig()
        self.registry = (
            registry
            if registry is not None
            else RepoManagerRegistry(lambda path: GitStateManager(path, self.config))
        )
        self.repo_path = normalize_repo_path(repo_path)
        self.manager: GitStateManager | None = None
        self.selected_index = 0
        self.selected_hunk_index = 0
        self.staging = StagingOperations(
            lambda: self.manager,
            lambda: self.selected_index,
            lambda: self.selected_hunk_index,
        )
        self.follow_mode: FollowMode | None = None
        self.stopped = asyncio.Event()
        self._unsubscribe = None
        self._tasks: set[asyncio.Task] = set()

    # -----------------------------------------------------------------
    # lifecycle
    # -----------------------------------------------------------------

    async def start(self) -> None:
        if self.config.follow_file is not None:
            self.follow_mode = FollowMode(
                self.config.follow_file,
                lambda: self.repo_path,
                self._on_follow_repo_change,
                self._on_follow_file_navigate,
                interval=self.config.watch_interval,
            )
        await self._attach(self.repo_path)
        if self.follow_mode is not None:
            await self.follow_mode.start()

    async def close(self) -> None:
        if self.follow_mode is not None:
            self.follow_mode.stop()
        self._detach()
        current = asyncio.current_task()
        for task in list(self._tasks):
            if task is not current:
                task.cancel()
        self.registry.dispose_all()
        self.stopped.set()

    async def _attach(self, repo_path: Path) -> None:
        self.repo_path = repo_path
        self.manager = self.registry.acquire(repo_path)
        self._unsubscribe = self.manager.subscribe(self._on_state_change)
        self.selected_index = 0
        self.selected_hunk_index = 0
        await self.manager.refresh()
        if self.config.watch:
            await self.manager.start_watching(self.config.watch_interval)
        logger.info(f"Session attached to {repo_path}")

    def _detach(self) -> None:
        if self.manager is None:
            return
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.registry.release(self.manager.repo_path)
        self.manager = None

    async def switch_repo(self, path: str | Path) -> bool:
        """Move the session to the repository containing `path`."""
        root = await find_repo_root(normalize_repo_path(path))
        if root is None:
            logger.warning(f"Not switching: {path} is not inside a git repository")
            return False
        root = normalize_repo_path(root)
        if root == self.repo_path and self.manager is not None:
            return False

        self._detach()
        await self._attach(root)
        return True

    def _on_follow_repo_change(self, path: Path, state: FollowState) -> None:
        logger.info(f"Following {state.source_file} to {path}")
        self._spawn(self.switch_repo(path))

    def _on_follow_file_navigate(self, raw_content: str) -> None:
        self._spawn(self.navigate_to_file(raw_content))

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def settle(self) -> None:
        """Wait for follow-up work the last state change kicked off."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -----------------------------------------------------------------
    # selection
    # -----------------------------------------------------------------

    @property
    def files(self):
        if self.manager is None or self.manager.state.status is None:
            return ()
        return self.manager.state.status.files

    @property
    def selected_entry(self):
        return file_at_index(self.files, self.selected_index)

    def _on_state_change(self, state: WorkingTreeState) -> None:
        # the anchor has to wait for the refreshed status
        if state.is_loading:
            return
        self.reconcile_selection()

    def reconcile_selection(self) -> None:
        """
        Recompute the highlighted index after the file list changed.

        A pending anchor from the last staging operation wins, otherwise
        the index is clamped into the new list. When the highlighted
        entry is not the selected file any more, it gets selected.
        """
        files = self.files
        total = len(files)

        anchor = self.staging.consume_pending_anchor()
        if anchor is not None:
            self.selected_index = resolve_anchor(files, anchor)
        elif total == 0:
            self.selected_index = 0
        else:
            self.selected_index = min(max(self.selected_index, 0), total - 1)

        pending_hunk = self.staging.consume_pending_hunk_index()
        if pending_hunk is not None:
            self.selected_hunk_index = pending_hunk
        self._clamp_hunk_index()

        if self.manager is None:
            return
        entry = file_at_index(files, self.selected_index)
        current = self.manager.state.selected_file
        if entry is None and current is None:
            return
        if entry is not None and current is not None and entry.key == current.key:
            return
        self._spawn(self.manager.select_file(entry))

    def _clamp_hunk_index(self) -> None:
        diff = self.manager.state.diff if self.manager is not None else None
        count = diff.hunk_count if diff is not None else 0
        if count == 0:
            self.selected_hunk_index = 0
        else:
            self.selected_hunk_index = min(max(self.selected_hunk_index, 0), count - 1)

    async def select(self, index: int) -> None:
        files = self.files
        if not 0 <= index < len(files):
            raise ValidationError(f"No file at index {index}", f"{len(files)} files in the list")
        if index != self.selected_index:
            self.selected_hunk_index = 0
        self.selected_index = index
        if self.manager is not None:
            await self.manager.select_file(file_at_index(files, index))

    async def navigate_up(self) -> None:
        if self.files and self.selected_index > 0:
            await self.select(self.selected_index - 1)

    async def navigate_down(self) -> None:
        if self.selected_index < len(self.files) - 1:
            await self.select(self.selected_index + 1)

    async def navigate_to_file(self, raw_content: str) -> bool:
        """Select the entry for the file named by a follow-file line, when it is in this repository."""
        target = expand_path(raw_content)
        try:
            relative = target.relative_to(self.repo_path).as_posix()
        except ValueError:
            return False

        for i, entry in enumerate(categorize_files(self.files).ordered):
            if entry.path == relative:
                await self.select(i)
                return True
        return False

    # -----------------------------------------------------------------
    # control socket
    # -----------------------------------------------------------------

    def get_state(self) -> dict:
        manager = self.manager
        state = manager.state if manager is not None else WorkingTreeState()
        status = state.status
        ordered = categorize_files(self.files).ordered
        counts = section_counts(self.files)
        selected = state.selected_file

        return {
            "repoPath": str(self.repo_path),
            "isRepo": status.is_repo if status is not None else False,
            "branch": status.branch.current if status is not None else None,
            "selectedIndex": self.selected_index,
            "selectedHunkIndex": self.selected_hunk_index,
            "totalFiles": len(ordered),
            "stagedCount": manager.staged_count if manager is not None else 0,
            "sections": {category.value: count for category, count in counts.items()},
            "files": [entry.to_dict() for entry in ordered],
            "selectedFile": selected.to_dict() if selected is not None else None,
            "diffState": state.diff_state.value,
            "hunkCount": state.diff.hunk_count if state.diff is not None else 0,
            "additions": _count_kind(state, DiffLineKind.ADDITION),
            "deletions": _count_kind(state, DiffLineKind.DELETION),
            "hunkCounts": {
                path: {"staged": count.staged, "unstaged": count.unstaged}
                for path, count in state.hunk_counts.items()
            },
            "error": state.error,
            "following": self.follow_mode.is_enabled if self.follow_mode is not None else False,
        }

    async def handle_command(self, command: Command) -> dict:
        """Run one control command. Mutations report failure with the manager's error message."""
        ok = True
        match command:
            case GetStateCommand():
                return success(state=self.get_state())
            case RefreshCommand():
                if self.manager is not None:
                    await self.manager.refresh()
            case StageCommand():
                ok = await self.staging.stage_selected()
            case UnstageCommand():
                ok = await self.staging.unstage_selected()
            case StageAllCommand():
                ok = await self.staging.stage_all()
            case UnstageAllCommand():
                ok = await self.staging.unstage_all()
            case ToggleCommand(index=index):
                if index is None:
                    ok = await self.staging.toggle_selected()
                else:
                    ok = await self.staging.toggle_file_by_index(index)
            case ToggleHunkCommand(hunk_index=hunk_index):
                if hunk_index is not None:
                    self.selected_hunk_index = hunk_index
                ok = await self.staging.toggle_current_hunk()
            case CommitCommand(message=message, amend=amend):
                ok = self.manager is not None and await self.manager.commit(message, amend)
            case SelectCommand(index=index):
                await self.select(index)
            case NavigateUpCommand():
                await self.navigate_up()
            case NavigateDownCommand():
                await self.navigate_down()
            case QuitCommand():
                self._spawn(self.close())
                return success()

        await self.settle()
        error = self.manager.state.error if self.manager is not None else None
        if not ok and error:
            return failure(error)
        return success(changed=ok)


def _count_kind(state: WorkingTreeState, kind: DiffLineKind) -> int:
    if state.diff is None:
        return 0
    return sum(1 for line in state.diff.lines if line.kind == kind)
