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

from gitstage.core.data.selection import FileCategory, SelectionAnchor
from gitstage.core.data.status import FileEntry, FileStatus
from gitstage.core.selection.file_categories import (
    categorize_files,
    category_of,
    file_at_index,
    get_category_for_index,
    get_index_for_category_position,
    index_of_entry,
    resolve_anchor,
    section_counts,
)

STAGED_B = FileEntry("b.py", FileStatus.MODIFIED, staged=True)
MODIFIED_A = FileEntry("a.py", FileStatus.MODIFIED, staged=False)
UNTRACKED_N = FileEntry("n.txt", FileStatus.UNTRACKED, staged=False)
STAGED_C = FileEntry("c.py", FileStatus.ADDED, staged=True)
MODIFIED_D = FileEntry("d.py", FileStatus.DELETED, staged=False)

# porcelain order, not display order
FILES = (STAGED_B, MODIFIED_A, UNTRACKED_N, STAGED_C, MODIFIED_D)


def test_category_of():
    assert category_of(MODIFIED_A) == FileCategory.MODIFIED
    assert category_of(MODIFIED_D) == FileCategory.MODIFIED
    assert category_of(UNTRACKED_N) == FileCategory.UNTRACKED
    assert category_of(STAGED_C) == FileCategory.STAGED


def test_ordered_is_modified_untracked_staged():
    ordered = categorize_files(FILES).ordered
    assert ordered == (MODIFIED_A, MODIFIED_D, UNTRACKED_N, STAGED_B, STAGED_C)


def test_start_of_each_category():
    categorized = categorize_files(FILES)
    assert categorized.start_of(FileCategory.MODIFIED) == 0
    assert categorized.start_of(FileCategory.UNTRACKED) == 2
    assert categorized.start_of(FileCategory.STAGED) == 3


def test_section_counts():
    assert section_counts(FILES) == {
        FileCategory.MODIFIED: 2,
        FileCategory.UNTRACKED: 1,
        FileCategory.STAGED: 2,
    }


def test_file_at_index_uses_display_order():
    assert file_at_index(FILES, 0) == MODIFIED_A
    assert file_at_index(FILES, 3) == STAGED_B
    assert file_at_index(FILES, 5) is None
    assert file_at_index(FILES, -1) is None
    assert file_at_index((), 0) is None


def test_index_of_entry_matches_by_key():
    assert index_of_entry(FILES, FileEntry("c.py", FileStatus.MODIFIED, staged=True)) == 4
    assert index_of_entry(FILES, FileEntry("c.py", FileStatus.MODIFIED, staged=False)) is None


def test_get_category_for_index():
    assert get_category_for_index(FILES, 1) == SelectionAnchor(FileCategory.MODIFIED, 1)
    assert get_category_for_index(FILES, 2) == SelectionAnchor(FileCategory.UNTRACKED, 0)
    assert get_category_for_index(FILES, 4) == SelectionAnchor(FileCategory.STAGED, 1)
    assert get_category_for_index(FILES, 5) is None


def test_position_is_clamped_into_category():
    assert get_index_for_category_position(FILES, FileCategory.MODIFIED, 7) == 1
    assert get_index_for_category_position(FILES, FileCategory.STAGED, -3) == 3


def test_empty_category_falls_back_inside_list():
    only_staged = (STAGED_B, STAGED_C)
    assert get_index_for_category_position(only_staged, FileCategory.MODIFIED, 0) == 0
    assert get_index_for_category_position(only_staged, FileCategory.UNTRACKED, 4) == 0

    only_modified = (MODIFIED_A, MODIFIED_D)
    # staged would start after the last row
    assert get_index_for_category_position(only_modified, FileCategory.STAGED, 0) == 1


def test_empty_list_gives_zero():
    assert get_index_for_category_position((), FileCategory.STAGED, 3) == 0


def test_anchor_after_staging_keeps_position_in_section():
    # a.py highlighted at index 0, then staged
    anchor = get_category_for_index(FILES, 0)
    after = (
        FileEntry("a.py", FileStatus.MODIFIED, staged=True),
        STAGED_B,
        UNTRACKED_N,
        STAGED_C,
        MODIFIED_D,
    )
    index = resolve_anchor(after, anchor)
    # d.py moved up into the slot a.py left
    assert file_at_index(after, index) == MODIFIED_D


def test_anchor_at_end_of_section_clamps():
    anchor = get_category_for_index(FILES, 1)
    after = (STAGED_B, MODIFIED_A, UNTRACKED_N, STAGED_C, FileEntry("d.py", FileStatus.DELETED, staged=True))
    assert file_at_index(after, resolve_anchor(after, anchor)) == MODIFIED_A
