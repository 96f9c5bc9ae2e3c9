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

from gitstage.core.data.diff import DiffLineKind, DiffResult
from gitstage.core.data.history import CompareDiff, CompareFileDiff
from gitstage.core.data.selection import CommitSelection, FileSelection
from gitstage.core.data.status import FileStatus
from gitstage.core.diff.diff_parser import DiffParser, parse_diff
from gitstage.core.exceptions import GitError, GitStageError
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.state.observable import ObservableState
from gitstage.core.state.operation_queue import GitOperationQueue

CompareSelection = CommitSelection | FileSelection


@dataclass(frozen=True)
class CompareState:
    base_branch: str | None = None
    include_uncommitted: bool = False
    compare_diff: CompareDiff | None = None
    is_loading: bool = False
    error: str | None = None
    selection: CompareSelection | None = None
    selected_diff: DiffResult | None = None


def _section_status(section: DiffResult) -> FileStatus:
    for line in section.lines:
        if line.kind == DiffLineKind.HUNK:
            break
        if line.text.startswith("new file mode"):
            return FileStatus.ADDED
        if line.text.startswith("deleted file mode"):
            return FileStatus.DELETED
        if line.text.startswith("rename from"):
            return FileStatus.RENAMED
        if line.text.startswith("copy from"):
            return FileStatus.COPIED
    return FileStatus.MODIFIED


def build_compare_files(raw: str) -> tuple[CompareFileDiff, ...]:
    files = []
    for path, section_raw in DiffParser.split_file_diffs(raw):
        section = parse_diff(section_raw)
        files.append(
            CompareFileDiff(
                path=path,
                status=_section_status(section),
                additions=sum(1 for line in section.lines if line.kind == DiffLineKind.ADDITION),
                deletions=sum(1 for line in section.lines if line.kind == DiffLineKind.DELETION),
                diff=section,
            )
        )
    return tuple(files)


class CompareManager(ObservableState[CompareState]):
    """
    Compares the current branch against a base branch.

    The diff runs from the merge base, so only changes made on this branch
    show up. With include_uncommitted the working tree is the target
    instead of HEAD.
    """

    def __init__(self, commands: GitCommands, queue: GitOperationQueue) -> None:
        super().__init__(CompareState())
        self.commands = commands
        self.queue = queue

    @property
    def is_loaded(self) -> bool:
        return self.state.base_branch is not None

    async def refresh_compare_diff(self, include_uncommitted: bool | None = None) -> None:
        if include_uncommitted is None:
            include_uncommitted = self.state.include_uncommitted

        self._update(is_loading=True, error=None, include_uncommitted=include_uncommitted)
        try:
            compare_diff = await self.queue.enqueue(
                lambda: self._load_compare_diff(include_uncommitted)
            )
        except GitStageError as e:
            logger.error(f"Failed to load compare diff: {e.message}")
            self._update(is_loading=False, error=f"Failed to load compare diff: {e.message}")
            return

        self._update(
            compare_diff=compare_diff,
            base_branch=compare_diff.base_branch,
            is_loading=False,
            selection=None,
            selected_diff=None,
        )

    async def _load_compare_diff(self, include_uncommitted: bool) -> CompareDiff:
        base = self.state.base_branch or await self.commands.default_base_branch()
        if base is None:
            raise GitError("No base branch found")

        merge_base = await self.commands.merge_base(base)
        commits = await self.commands.log(0, f"{merge_base}..HEAD")
        raw = await self.commands.diff_between_refs(
            merge_base, None if include_uncommitted else "HEAD"
        )
        return CompareDiff(
            base_branch=base,
            merge_base=merge_base,
            commits=tuple(commits),
            files=build_compare_files(raw),
        )

    async def set_base_branch(self, branch: str, include_uncommitted: bool = False) -> None:
        self._update(base_branch=branch)
        await self.refresh_compare_diff(include_uncommitted)

    def reset_base_branch(self) -> None:
        self._update(base_branch=None, compare_diff=None, selection=None, selected_diff=None)

    async def refresh_if_loaded(self) -> None:
        if self.is_loaded:
            await self.refresh_compare_diff()

    async def get_candidate_base_branches(self) -> list[str]:
        return await self.queue.enqueue(self.commands.candidate_base_branches)

    async def select_commit(self, index: int) -> None:
        compare_diff = self.state.compare_diff
        if compare_diff is None or not 0 <= index < len(compare_diff.commits):
            self._update(selection=None, selected_diff=None)
            return

        selection = CommitSelection(index)
        self._update(selection=selection, selected_diff=None)
        commit = compare_diff.commits[index]
        try:
            raw = await self.queue.enqueue(lambda: self.commands.commit_diff(commit.hash))
        except GitStageError as e:
            self._update(error=f"Failed to load commit diff: {e.message}")
            return

        if self.state.selection is selection:
            self._update(selected_diff=parse_diff(raw))

    def select_file(self, index: int) -> None:
        compare_diff = self.state.compare_diff
        if compare_diff is None or not 0 <= index < len(compare_diff.files):
            self._update(selection=None, selected_diff=None)
            return

        self._update(selection=FileSelection(index), selected_diff=compare_diff.files[index].diff)
