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

from dataclasses import asdict, dataclass, field
from enum import Enum

from gitstage.core.data.diff import DiffResult


class FileStatus(str, Enum):
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    UNTRACKED = "untracked"
    RENAMED = "renamed"
    COPIED = "copied"


@dataclass(frozen=True)
class FileEntry:
    """
    A single row of the working file list.

    A path can show up twice, once with staged=True and once with
    staged=False, which is how a partially staged file is represented.
    """

    path: str
    status: FileStatus
    staged: bool
    original_path: str | None = None
    insertions: int | None = None
    deletions: int | None = None

    @property
    def key(self) -> tuple[str, bool]:
        return (self.path, self.staged)

    @property
    def is_untracked(self) -> bool:
        return self.status == FileStatus.UNTRACKED

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class BranchInfo:
    current: str
    tracking: str | None = None
    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class RepoStatus:
    files: tuple[FileEntry, ...]
    branch: BranchInfo
    is_repo: bool

    @staticmethod
    def not_a_repo() -> "RepoStatus":
        return RepoStatus(files=(), branch=BranchInfo(current=""), is_repo=False)

    @property
    def staged_count(self) -> int:
        return sum(1 for f in self.files if f.staged)


@dataclass(frozen=True)
class HunkCount:
    staged: int = 0
    unstaged: int = 0


@dataclass(frozen=True)
class FileDiffs:
    unstaged: DiffResult = field(default_factory=DiffResult.empty)
    staged: DiffResult = field(default_factory=DiffResult.empty)


@dataclass(frozen=True)
class StashEntry:
    index: int
    message: str


@dataclass(frozen=True)
class LocalBranch:
    name: str
    current: bool
    tracking: str | None = None
