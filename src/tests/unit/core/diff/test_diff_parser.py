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

from gitstage.core.data.diff import DiffLineKind
from gitstage.core.diff.diff_parser import DiffParser, parse_diff

RAW = (
    "diff --git a/app.py b/app.py\n"
    "index 83db48f..bf269f4 100644\n"
    "--- a/app.py\n"
    "+++ b/app.py\n"
    "@@ -1,3 +1,3 @@\n"
    " import os\n"
    "-print('hello')\n"
    "+print('hello world')\n"
    " x = 1\n"
    "@@ -10,2 +10,3 @@ def main():\n"
    " a\n"
    "+b\n"
    " c\n"
)

TWO_FILES = (
    "diff --git a/one.txt b/one.txt\n"
    "index 1111111..2222222 100644\n"
    "--- a/one.txt\n"
    "+++ b/one.txt\n"
    "@@ -1 +1 @@\n"
    "-old\n"
    "+new\n"
    "diff --git a/two.txt b/two.txt\n"
    "new file mode 100644\n"
    "index 0000000..3333333\n"
    "--- /dev/null\n"
    "+++ b/two.txt\n"
    "@@ -0,0 +1,2 @@\n"
    "+a\n"
    "+b\n"
)


# -----------------------------------------------------------------------------
# Line classification
# -----------------------------------------------------------------------------


def test_classifies_every_line():
    result = parse_diff(RAW)
    kinds = [line.kind for line in result.lines]

    assert kinds[:4] == [DiffLineKind.HEADER] * 4
    assert kinds[4] == DiffLineKind.HUNK
    assert kinds[5] == DiffLineKind.CONTEXT
    assert kinds[6] == DiffLineKind.DELETION
    assert kinds[7] == DiffLineKind.ADDITION
    assert kinds[9] == DiffLineKind.HUNK
    assert result.hunk_count == 2
    assert result.raw == RAW


def test_line_numbers_follow_hunk_headers():
    lines = parse_diff(RAW).lines

    assert (lines[5].old_line_number, lines[5].new_line_number) == (1, 1)
    assert (lines[6].old_line_number, lines[6].new_line_number) == (2, None)
    assert (lines[7].old_line_number, lines[7].new_line_number) == (None, 2)
    assert (lines[8].old_line_number, lines[8].new_line_number) == (3, 3)

    # second hunk restarts at 10
    assert (lines[10].old_line_number, lines[10].new_line_number) == (10, 10)
    assert lines[11].new_line_number == 11
    assert (lines[12].old_line_number, lines[12].new_line_number) == (11, 12)


def test_content_strips_marker():
    lines = parse_diff(RAW).lines
    assert lines[6].content == "print('hello')"
    assert lines[7].content == "print('hello world')"
    assert lines[5].content == "import os"
    assert lines[0].content == lines[0].text


def test_hunk_header_without_counts_defaults_to_one():
    header = DiffParser.parse_hunk_header("@@ -5 +7,2 @@ section")
    assert header.old_start == 5
    assert header.old_count == 1
    assert header.new_start == 7
    assert header.new_count == 2


def test_malformed_hunk_header_is_still_a_hunk_line():
    assert DiffParser.parse_hunk_header("@@ nonsense @@") is None

    lines = parse_diff("@@ nonsense @@\n context\n").lines
    assert lines[0].kind == DiffLineKind.HUNK
    assert lines[1].old_line_number is None
    assert lines[1].new_line_number is None


def test_no_newline_marker_is_context():
    raw = "@@ -1 +1 @@\n-a\n\\ No newline at end of file\n+b\n"
    lines = parse_diff(raw).lines
    assert lines[2].kind == DiffLineKind.CONTEXT


def test_empty_input():
    result = parse_diff("")
    assert result.is_empty
    assert result.hunk_count == 0


# -----------------------------------------------------------------------------
# Multi-file helpers
# -----------------------------------------------------------------------------


def test_count_hunks_per_file():
    counts = DiffParser.count_hunks_per_file(RAW + TWO_FILES)
    assert counts == {"app.py": 2, "one.txt": 1, "two.txt": 1}


def test_split_file_diffs_keeps_sections_verbatim():
    sections = DiffParser.split_file_diffs(TWO_FILES)

    assert [path for path, _ in sections] == ["one.txt", "two.txt"]
    assert "".join(section for _, section in sections) == TWO_FILES
    assert sections[1][1].startswith("diff --git a/two.txt b/two.txt\nnew file mode")


def test_split_file_diffs_ignores_leading_noise():
    assert DiffParser.split_file_diffs("warning: something\n") == []


# -----------------------------------------------------------------------------
# Untracked files
# -----------------------------------------------------------------------------


def test_synthesize_untracked_diff():
    raw = DiffParser.synthesize_untracked_diff("notes.md", "first\nsecond\n")

    assert raw == (
        "diff --git a/notes.md b/notes.md\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        "+++ b/notes.md\n"
        "@@ -0,0 +1,2 @@\n"
        "+first\n"
        "+second\n"
    )
    result = parse_diff(raw)
    assert result.hunk_count == 1
    assert [line.new_line_number for line in result.lines if line.kind == DiffLineKind.ADDITION] == [1, 2]


def test_synthesize_untracked_diff_without_trailing_newline():
    raw = DiffParser.synthesize_untracked_diff("a.txt", "only")
    assert raw.endswith("@@ -0,0 +1,1 @@\n+only\n\\ No newline at end of file\n")


def test_synthesize_untracked_diff_for_empty_file():
    raw = DiffParser.synthesize_untracked_diff("empty.txt", "")
    assert raw == "diff --git a/empty.txt b/empty.txt\nnew file mode 100644\n"
    assert parse_diff(raw).hunk_count == 0
