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

import asyncio

from gitstage.core.diff.diff_parser import parse_diff
from gitstage.core.diff.hunk_patcher import count_hunks, extract_hunk_patch, hunk_boundaries
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.git_interface.SubprocessGitInterface import SubprocessGitInterface

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

SECOND_FILE = (
    "diff --git a/lib.py b/lib.py\n"
    "index 4444444..5555555 100644\n"
    "--- a/lib.py\n"
    "+++ b/lib.py\n"
    "@@ -3 +3 @@\n"
    "-x\n"
    "+y\n"
)


def test_hunk_boundaries():
    boundaries = hunk_boundaries(parse_diff(RAW).lines)

    assert len(boundaries) == 2
    first, second = boundaries
    assert (first.hunk_index, first.file_start, first.header_index, first.end) == (0, 0, 4, 9)
    # the empty piece after the final newline belongs to no hunk
    assert (second.hunk_index, second.file_start, second.header_index, second.end) == (1, 0, 9, 13)


def test_hunk_boundaries_across_files():
    boundaries = hunk_boundaries(parse_diff(RAW + SECOND_FILE).lines)

    assert len(boundaries) == 3
    assert boundaries[1].end == 13
    assert boundaries[2].file_start == 13
    assert boundaries[2].header_index == 17


def test_count_hunks():
    assert count_hunks(RAW) == 2
    assert count_hunks("") == 0


def test_extract_first_hunk():
    patch = extract_hunk_patch(RAW, 0)
    assert patch == (
        "diff --git a/app.py b/app.py\n"
        "index 83db48f..bf269f4 100644\n"
        "--- a/app.py\n"
        "+++ b/app.py\n"
        "@@ -1,3 +1,3 @@\n"
        " import os\n"
        "-print('hello')\n"
        "+print('hello world')\n"
        " x = 1\n"
    )


def test_extract_later_hunk_keeps_file_header():
    patch = extract_hunk_patch(RAW, 1)
    assert patch == (
        "diff --git a/app.py b/app.py\n"
        "index 83db48f..bf269f4 100644\n"
        "--- a/app.py\n"
        "+++ b/app.py\n"
        "@@ -10,2 +10,3 @@ def main():\n"
        " a\n"
        "+b\n"
        " c\n"
    )


def test_extract_hunk_of_second_file_uses_its_own_header():
    patch = extract_hunk_patch(RAW + SECOND_FILE, 2)
    assert patch == SECOND_FILE


def test_extract_out_of_range_is_none():
    assert extract_hunk_patch(RAW, 2) is None
    assert extract_hunk_patch(RAW, -1) is None
    assert extract_hunk_patch("", 0) is None


def test_extracted_hunk_applies_to_index(committed_repo, git):
    lines = [f"line {i}\n" for i in range(1, 31)]
    lines[1] = "line 2 changed\n"
    lines[24] = "line 25 changed\n"
    (committed_repo / "app.py").write_text("".join(lines))

    commands = GitCommands(SubprocessGitInterface(committed_repo))
    raw = asyncio.run(commands.diff("app.py"))
    assert count_hunks(raw) == 2

    patch = extract_hunk_patch(raw, 1)
    asyncio.run(commands.apply_patch(patch, cached=True))

    staged = git("diff", "--cached")
    assert "+line 25 changed" in staged
    assert "line 2 changed" not in staged

    unstaged = git("diff")
    assert "+line 2 changed" in unstaged
    assert "line 25 changed" not in unstaged

    # and back out again
    staged_patch = extract_hunk_patch(staged, 0)
    asyncio.run(commands.apply_patch(staged_patch, cached=True, reverse=True))
    assert git("diff", "--cached") == ""


def test_every_hunk_of_crlf_file_without_final_newline_applies(git_repo, git):
    lines = [f"line {i}\r\n".encode() for i in range(1, 21)]
    lines[-1] = b"line 20"
    path = git_repo / "dos.txt"
    path.write_bytes(b"".join(lines))
    git("add", "dos.txt")
    git("commit", "-q", "-m", "CRLF file")

    lines[2] = b"line 3 changed\r\n"
    lines[-1] = b"line 20 changed"
    path.write_bytes(b"".join(lines))

    commands = GitCommands(SubprocessGitInterface(git_repo))
    raw = asyncio.run(commands.diff("dos.txt"))
    assert count_hunks(raw) == 2

    last = extract_hunk_patch(raw, 1)
    assert "-line 20\n\\ No newline at end of file\n" in last
    assert "+line 20 changed\n\\ No newline at end of file\n" in last
    assert "\r\n" in last

    for index in range(count_hunks(raw)):
        patch = extract_hunk_patch(raw, index)
        asyncio.run(commands.apply_patch(patch, check=True))

    asyncio.run(commands.apply_patch(last))
    assert git("diff", "--cached", "--numstat") == "1\t1\tdos.txt\n"
