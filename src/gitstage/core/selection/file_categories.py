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
Category ordering of the working file list.

The list is shown as three sections, modified, untracked, staged, and
every list index used for selection is an index into that ordering,
not into RepoStatus.files.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from gitstage.core.data.selection import CATEGORY_ORDER, FileCategory, SelectionAnchor
from gitstage.core.data.status import FileEntry


@dataclass(frozen=True)
class CategorizedFiles:
    modified: tuple[FileEntry, ...]
    untracked: tuple[FileEntry, ...]
    staged: tuple[FileEntry, ...]

    @property
    def ordered(self) -> tuple[FileEntry, ...]:
        return self.modified + self.untracked + self.staged

    def files_in(self, category: FileCategory) -> tuple[FileEntry, ...]:
        match category:
            case FileCategory.MODIFIED:
                return self.modified
            case FileCategory.UNTRACKED:
                return self.untracked
            case FileCategory.STAGED:
                return self.staged

    def start_of(self, category: FileCategory) -> int:
        """Ordered index where `category` begins (or would begin, when empty)."""
        start = 0
        for current in CATEGORY_ORDER:
            if current == category:
                return start
            start += len(self.files_in(current))
        raise ValueError(category)


def category_of(entry: FileEntry) -> FileCategory:
    if entry.staged:
        return FileCategory.STAGED
    if entry.is_untracked:
        return FileCategory.UNTRACKED
    return FileCategory.MODIFIED


def categorize_files(files: Sequence[FileEntry]) -> CategorizedFiles:
    return CategorizedFiles(
        modified=tuple(f for f in files if category_of(f) == FileCategory.MODIFIED),
        untracked=tuple(f for f in files if category_of(f) == FileCategory.UNTRACKED),
        staged=tuple(f for f in files if category_of(f) == FileCategory.STAGED),
    )


def section_counts(files: Sequence[FileEntry]) -> dict[FileCategory, int]:
    categorized = categorize_files(files)
    return {category: len(categorized.files_in(category)) for category in CATEGORY_ORDER}


def file_at_index(files: Sequence[FileEntry], index: int) -> FileEntry | None:
    ordered = categorize_files(files).ordered
    if 0 <= index < len(ordered):
        return ordered[index]
    return None


def index_of_entry(files: Sequence[FileEntry], entry: FileEntry) -> int | None:
    for i, candidate in enumerate(categorize_files(files).ordered):
        if candidate.key == entry.key:
            return i
    return None


def get_category_for_index(files: Sequence[FileEntry], index: int) -> SelectionAnchor | None:
    categorized = categorize_files(files)
    if not 0 <= index < len(categorized.ordered):
        return None

    for category in CATEGORY_ORDER:
        start = categorized.start_of(category)
        size = len(categorized.files_in(category))
        if start <= index < start + size:
            return SelectionAnchor(category, index - start)
    return None


def get_index_for_category_position(
    files: Sequence[FileEntry], category: FileCategory, position: int
) -> int:
    """
    Flat index for `position` within `category`, always inside the list.

    The position is clamped into the category. An empty category falls
    back to the nearest valid index around where it would start; an
    empty list gives 0.
    """
    categorized = categorize_files(files)
    total = len(categorized.ordered)
    if total == 0:
        return 0

    start = categorized.start_of(category)
    size = len(categorized.files_in(category))
    if size == 0:
        return min(max(start, 0), total - 1)

    return start + min(max(position, 0), size - 1)


def resolve_anchor(files: Sequence[FileEntry], anchor: SelectionAnchor) -> int:
    return get_index_for_category_position(files, anchor.category, anchor.index_within_category)
