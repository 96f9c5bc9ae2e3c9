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
from enum import Enum


class DiffLineKind(str, Enum):
    HEADER = "header"
    HUNK = "hunk"
    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT = "context"


@dataclass(frozen=True)
class DiffLine:
    """
    One physical line of `git diff` output.

    `text` keeps the leading marker (`+`, `-` or space) so the line can be
    written back verbatim. Line numbers are absolute and 1-based.
    """

    kind: DiffLineKind
    text: str
    old_line_number: int | None = None
    new_line_number: int | None = None

    @property
    def content(self) -> str:
        """Text without the one-character diff marker."""
        if self.kind in (DiffLineKind.ADDITION, DiffLineKind.DELETION):
            return self.text[1:]
        if self.kind == DiffLineKind.CONTEXT and self.text.startswith(" "):
            return self.text[1:]
        return self.text

    @property
    def is_change(self) -> bool:
        return self.kind in (DiffLineKind.ADDITION, DiffLineKind.DELETION)


@dataclass(frozen=True)
class DiffResult:
    # raw must be exactly the text that lines was parsed from, hunk
    # extraction re-slices raw rather than lines
    raw: str
    lines: tuple[DiffLine, ...] = field(default_factory=tuple)

    @staticmethod
    def empty() -> "DiffResult":
        return DiffResult(raw="", lines=())

    @property
    def hunk_count(self) -> int:
        return sum(1 for line in self.lines if line.kind == DiffLineKind.HUNK)

    @property
    def is_empty(self) -> bool:
        return not self.raw


@dataclass(frozen=True)
class HunkHeader:
    old_start: int
    old_count: int
    new_start: int
    new_count: int


@dataclass(frozen=True)
class HunkBoundary:
    """
    Where hunk `hunk_index` lives in a parsed diff.

    Lines [header_index, end) are the `@@` line and its body. file_start is
    the first line of the enclosing file section, so [file_start, first
    hunk of that section) is the file header block.
    """

    hunk_index: int
    file_start: int
    header_index: int
    end: int


@dataclass(frozen=True)
class WordDiffSegment:
    text: str
    changed: bool


@dataclass(frozen=True)
class ModificationPair:
    deletion_index: int
    addition_index: int
    old_segments: tuple[WordDiffSegment, ...]
    new_segments: tuple[WordDiffSegment, ...]
