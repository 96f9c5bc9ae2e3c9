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

from collections.abc import Callable
from pathlib import Path

from loguru import logger

from gitstage.context import GitStageConfig
from gitstage.core.data.status import FileEntry, HunkCount
from gitstage.core.exceptions import GitError
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.git_interface.SubprocessGitInterface import (
    SubprocessGitInterface,
)
from gitstage.core.state.compare_manager import CompareManager
from gitstage.core.state.history_manager import HistoryManager
from gitstage.core.state.operation_queue import GitOperationQueue
from gitstage.core.state.repo_operations import (
    RepoOperationCallbacks,
    RepoOperationManager,
)
from gitstage.core.state.working_tree import WorkingTreeManager, WorkingTreeState
from gitstage.core.watcher.repo_watcher import RepoWatcher


def normalize_repo_path(path: str | Path) -> Path:
    return Path(path).expanduser().resolve()


class GitStateManager:
    """
    Everything gitstage knows about one repository.

    Four sub-managers share a single operation queue, so no two git
    commands against this repository ever overlap. The working tree
    operations are also exposed directly on this object.
    """

    def __init__(
        self,
        repo_path: str | Path,
        config: GitStageConfig | None = None,
        commands: GitCommands | None = None,
    ) -> None:
        self.repo_path = normalize_repo_path(repo_path)
        self.config = config if config is not None else GitStageConfig()
        self.commands = (
            commands
            if commands is not None
            else GitCommands(SubprocessGitInterface(self.repo_path))
        )
        self.queue = GitOperationQueue()

        self.working_tree = WorkingTreeManager(
            self.commands, self.queue, self.config.check_ignore_batch_size
        )
        self.history = HistoryManager(self.commands, self.queue, self.config.history_count)
        self.compare = CompareManager(self.commands, self.queue)
        self.repo_operations = RepoOperationManager(
            self.commands,
            self.queue,
            RepoOperationCallbacks(
                refresh=self.working_tree.refresh,
                load_stash_list=self.working_tree.load_stash_list,
                reset_compare_base_branch=self.compare.reset_base_branch,
            ),
        )

        self.working_tree.add_refresh_hook(self.history.refresh_if_loaded)
        self.working_tree.add_refresh_hook(self.compare.refresh_if_loaded)

        self.watcher: RepoWatcher | None = None
        self.disposed = False

    # -----------------------------------------------------------------
    # working tree delegates
    # -----------------------------------------------------------------

    @property
    def state(self) -> WorkingTreeState:
        return self.working_tree.state

    @property
    def staged_count(self) -> int:
        return self.working_tree.staged_count

    @property
    def hunk_counts(self) -> dict[str, HunkCount]:
        return self.working_tree.hunk_counts

    def subscribe(self, listener: Callable[[WorkingTreeState], None]) -> Callable[[], None]:
        return self.working_tree.subscribe(listener)

    async def refresh(self) -> None:
        await self.working_tree.refresh()

    def schedule_refresh(self) -> bool:
        return self.working_tree.schedule_refresh()

    async def stage(self, entry: FileEntry) -> bool:
        return await self.working_tree.stage(entry)

    async def unstage(self, entry: FileEntry) -> bool:
        return await self.working_tree.unstage(entry)

    async def stage_all(self) -> bool:
        return await self.working_tree.stage_all()

    async def unstage_all(self) -> bool:
        return await self.working_tree.unstage_all()

    async def discard(self, entry: FileEntry) -> bool:
        return await self.working_tree.discard(entry)

    async def stage_hunk(self, patch: str) -> bool:
        return await self.working_tree.stage_hunk(patch)

    async def unstage_hunk(self, patch: str) -> bool:
        return await self.working_tree.unstage_hunk(patch)

    async def commit(self, message: str, amend: bool = False) -> bool:
        return await self.working_tree.commit(message, amend)

    async def select_file(self, entry: FileEntry | None) -> None:
        await self.working_tree.select_file(entry)

    async def load_stash_list(self) -> None:
        await self.working_tree.load_stash_list()

    # -----------------------------------------------------------------
    # lifecycle
    # -----------------------------------------------------------------

    async def start_watching(self, interval: float | None = None) -> bool:
        """Poll the repository and schedule a refresh on every change. False when not a repository."""
        if self.watcher is not None and self.watcher.is_running:
            return True

        try:
            git_dir = await self.queue.enqueue(self.commands.git_dir)
        except GitError as e:
            logger.warning(f"Cannot watch {self.repo_path}: {e.message}")
            return False
        if git_dir is None:
            return False

        self.watcher = RepoWatcher(
            self.repo_path,
            git_dir,
            on_change=self.schedule_refresh,
            interval=interval if interval is not None else self.config.watch_interval,
            ignored_dirs=self._ignored_top_level_dirs,
        )
        await self.watcher.start()
        return True

    async def _ignored_top_level_dirs(self) -> frozenset[str]:
        try:
            names = [p.name for p in self.repo_path.iterdir() if p.is_dir() and p.name != ".git"]
        except OSError:
            return frozenset()
        ignored = await self.queue.enqueue(lambda: self.commands.check_ignore(names))
        return frozenset(ignored)

    def dispose(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None
        self.queue.cancel_background()
        for manager in (self.working_tree, self.history, self.compare, self.repo_operations):
            manager.clear_listeners()
        self.disposed = True
        logger.debug(f"Disposed manager for {self.repo_path}")


ManagerFactory = Callable[[Path], GitStateManager]


class RepoManagerRegistry:
    """
    One GitStateManager per repository, keyed by normalized absolute path.

    `get_manager_for_repo`/`remove_manager_for_repo` are the plain
    create-or-return and dispose-and-forget pair. `acquire`/`release` add
    reference counting for owners that share a manager: the manager is
    disposed when the last holder releases it.
    """

    def __init__(self, factory: ManagerFactory | None = None) -> None:
        self._factory = factory if factory is not None else GitStateManager
        self._managers: dict[Path, GitStateManager] = {}
        self._refcounts: dict[Path, int] = {}

    def __contains__(self, path: str | Path) -> bool:
        return normalize_repo_path(path) in self._managers

    def __len__(self) -> int:
        return len(self._managers)

    def get_manager_for_repo(self, path: str | Path) -> GitStateManager:
        key = normalize_repo_path(path)
        manager = self._managers.get(key)
        if manager is None:
            manager = self._factory(key)
            self._managers[key] = manager
            logger.debug(f"Created manager for {key}")
        return manager

    def remove_manager_for_repo(self, path: str | Path) -> None:
        key = normalize_repo_path(path)
        manager = self._managers.pop(key, None)
        self._refcounts.pop(key, None)
        if manager is not None:
            manager.dispose()

    def acquire(self, path: str | Path) -> GitStateManager:
        key = normalize_repo_path(path)
        manager = self.get_manager_for_repo(key)
        self._refcounts[key] = self._refcounts.get(key, 0) + 1
        return manager

    def release(self, path: str | Path) -> None:
        key = normalize_repo_path(path)
        count = self._refcounts.get(key, 0) - 1
        if count > 0:
            self._refcounts[key] = count
            return
        self.remove_manager_for_repo(key)

    def refcount(self, path: str | Path) -> int:
        return self._refcounts.get(normalize_repo_path(path), 0)

    def dispose_all(self) -> None:
        for key in list(self._managers):
            self.remove_manager_for_repo(key)
