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

from dataclasses import dataclass, field
from datetime import datetime

from gitstage.core.data.diff import DiffResult
from gitstage.core.data.status import FileStatus


@dataclass(frozen=True)
class CommitInfo:
    hash: str
    short_hash: str
    message: str
    author: str
    date: datetime
    refs: str = ""


@dataclass(frozen=True)
class CompareFileDiff:
    path: str
    status: FileStatus
    additions: int
    deletions: int
    diff: DiffResult


@dataclass(frozen=True)
class CompareDiff:
    base_branch: str
    merge_base: str
    commits: tuple[CommitInfo, ...] = field(default_factory=tuple)
    files: tuple[CompareFileDiff, ...] = field(default_factory=tuple)

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)
