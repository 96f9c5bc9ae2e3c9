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
Change detection for a repository by polling.

Each tick stats the git metadata (index, HEAD, refs, .gitignore) and the
working tree, skipping `.git` and top-level directories git ignores, and
compares the result with the previous tick. Any difference fires the
change callback, which is expected to coalesce (see
GitOperationQueue.schedule_refresh).
"""

import asyncio
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

from loguru import logger

from gitstage.constants import DEFAULT_WATCH_INTERVAL

Fingerprint = frozenset[tuple[str, int, int]]


def _stat_entry(path: Path) -> tuple[str, int, int] | None:
    try:
        st = path.stat()
    except OSError:
        return None
    return (str(path), st.st_mtime_ns, st.st_size)


def metadata_paths(repo_path: Path, git_dir: Path) -> list[Path]:
    paths = [git_dir / "index", git_dir / "HEAD", repo_path / ".gitignore"]
    refs = git_dir / "refs"
    if refs.is_dir():
        for root, _dirs, files in os.walk(refs):
            paths.extend(Path(root) / name for name in files)
    packed = git_dir / "packed-refs"
    paths.append(packed)
    return paths


def worktree_paths(repo_path: Path, ignored_dirs: frozenset[str]) -> list[Path]:
    paths: list[Path] = []
    for root, dirs, files in os.walk(repo_path):
        root_path = Path(root)
        if root_path == repo_path:
            dirs[:] = [d for d in dirs if d != ".git" and d not in ignored_dirs]
        else:
            dirs[:] = [d for d in dirs if d != ".git"]
        paths.extend(root_path / name for name in files)
    return paths


def compute_fingerprint(
    repo_path: Path,
    git_dir: Path,
    ignored_dirs: frozenset[str] = frozenset(),
    include_worktree: bool = True,
) -> Fingerprint:
    paths = metadata_paths(repo_path, git_dir)
    if include_worktree:
        paths += worktree_paths(repo_path, ignored_dirs)
    return frozenset(entry for entry in map(_stat_entry, paths) if entry is not None)


class RepoWatcher:
    def __init__(
        self,
        repo_path: Path,
        git_dir: Path,
        on_change: Callable[[], object],
        interval: float = DEFAULT_WATCH_INTERVAL,
        ignored_dirs: Callable[[], Awaitable[frozenset[str]]] | None = None,
        include_worktree: bool = True,
    ) -> None:
        self.repo_path = repo_path
        self.git_dir = git_dir
        self.on_change = on_change
        self.interval = interval
        self.include_worktree = include_worktree
        self._load_ignored_dirs = ignored_dirs
        self._ignored_dirs: frozenset[str] = frozenset()
        self._fingerprint: Fingerprint | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            return
        await self._reload_ignored_dirs()
        self._fingerprint = await self._snapshot()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Watching {self.repo_path} every {self.interval}s")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug(f"Stopped watching {self.repo_path}")

    async def _reload_ignored_dirs(self) -> None:
        if self._load_ignored_dirs is not None:
            self._ignored_dirs = await self._load_ignored_dirs()

    async def _snapshot(self) -> Fingerprint:
        return await asyncio.to_thread(
            compute_fingerprint,
            self.repo_path,
            self.git_dir,
            self._ignored_dirs,
            self.include_worktree,
        )

    async def poll(self) -> bool:
        """One tick. Returns True when a change was detected and reported."""
        current = await self._snapshot()
        previous = self._fingerprint
        self._fingerprint = current
        if previous is None or current == previous:
            return False

        gitignore = str(self.repo_path / ".gitignore")
        changed = current ^ previous
        if any(entry[0] == gitignore for entry in changed):
            await self._reload_ignored_dirs()

        self.on_change()
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.poll()
            except OSError as e:
                logger.warning(f"Watcher error for {self.repo_path}: {e}")
