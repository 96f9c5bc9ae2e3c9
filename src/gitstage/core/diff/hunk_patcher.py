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

from collections.abc import Sequence

from gitstage.core.data.diff import DiffLine, DiffLineKind, HunkBoundary
from gitstage.core.diff.diff_parser import DiffParser


def _is_file_start(line: DiffLine) -> bool:
    return line.kind == DiffLineKind.HEADER and line.text.startswith("diff --git")


def hunk_boundaries(lines: Sequence[DiffLine]) -> list[HunkBoundary]:
    """Locate every hunk of a parsed diff, in file order."""
    total = len(lines)
    # split("\n") leaves an empty trailing piece when the diff ends with a
    # newline, it belongs to no hunk
    if total and lines[-1].text == "" and lines[-1].kind == DiffLineKind.CONTEXT:
        total -= 1

    boundaries: list[HunkBoundary] = []
    file_start = 0
    open_hunk: int | None = None

    def close(end: int) -> None:
        nonlocal open_hunk
        if open_hunk is not None:
            boundaries.append(
                HunkBoundary(
                    hunk_index=len(boundaries),
                    file_start=file_start,
                    header_index=open_hunk,
                    end=end,
                )
            )
            open_hunk = None

    for i in range(total):
        line = lines[i]
        if _is_file_start(line):
            close(i)
            file_start = i
        elif line.kind == DiffLineKind.HUNK:
            close(i)
            open_hunk = i

    close(total)
    return boundaries


def count_hunks(raw_diff: str) -> int:
    return len(hunk_boundaries(DiffParser.parse(raw_diff).lines))


def extract_hunk_patch(raw_diff: str, hunk_index: int) -> str | None:
    """
    Cut a single hunk out of a file diff as a patch `git apply` accepts on
    its own.

    The patch is the file's header block followed by the one hunk, sliced
    verbatim from `raw_diff`. Returns None when `hunk_index` is out of
    range, which callers treat as a no-op.
    """
    if hunk_index < 0:
        return None

    parsed = DiffParser.parse(raw_diff)
    boundaries = hunk_boundaries(parsed.lines)
    if hunk_index >= len(boundaries):
        return None

    target = boundaries[hunk_index]

    # header block ends at the first hunk of the same file section
    header_end = target.header_index
    for boundary in boundaries:
        if boundary.file_start == target.file_start:
            header_end = boundary.header_index
            break

    pieces = raw_diff.split("\n")
    selected = pieces[target.file_start : header_end]
    selected += pieces[target.header_index : target.end]

    return "\n".join(selected) + "\n"
