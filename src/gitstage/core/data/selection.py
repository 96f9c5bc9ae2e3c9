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
from enum import Enum


class FileCategory(str, Enum):
    """The three file list sections, in display order."""

    MODIFIED = "modified"
    UNTRACKED = "untracked"
    STAGED = "staged"


CATEGORY_ORDER: tuple[FileCategory, ...] = (
    FileCategory.MODIFIED,
    FileCategory.UNTRACKED,
    FileCategory.STAGED,
)


@dataclass(frozen=True)
class SelectionAnchor:
    """Captured before a list-mutating operation, consumed once after the refresh."""

    category: FileCategory
    index_within_category: int


# Selection kinds. Which one is active depends on the view: history and
# compare select commits, the file list selects files, the diff pane hunks.


@dataclass(frozen=True)
class CommitSelection:
    index: int


@dataclass(frozen=True)
class FileSelection:
    index: int


@dataclass(frozen=True)
class HunkSelection:
    file_index: int
    hunk_index: int


Selection = CommitSelection | FileSelection | HunkSelection
