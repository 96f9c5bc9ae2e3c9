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

import re

from gitstage.core.data.diff import DiffLine, DiffLineKind, DiffResult, HunkHeader


class DiffParser:
    """
    Turns raw `git diff` text into line-numbered DiffLines.

    Parsing is deliberately permissive: nothing here raises. A malformed
    `@@` line is still classified as a hunk line, it just doesn't move the
    line counters.
    """

    _HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
    _DIFF_GIT_RE = re.compile(r"^diff --git a/(.+) b/(.+)$")

    _HEADER_PREFIXES = (
        "diff --git",
        "index ",
        "---",
        "+++",
        "new file mode",
        "deleted file mode",
        "old mode",
        "new mode",
        "Binary files",
        "similarity index",
        "dissimilarity index",
        "rename from",
        "rename to",
        "copy from",
        "copy to",
    )

    @classmethod
    def parse_hunk_header(cls, line: str) -> HunkHeader | None:
        match = cls._HUNK_RE.match(line)
        if not match:
            return None

        old_start, old_count, new_start, new_count = match.groups()
        return HunkHeader(
            old_start=int(old_start),
            old_count=int(old_count) if old_count is not None else 1,
            new_start=int(new_start),
            new_count=int(new_count) if new_count is not None else 1,
        )

    @classmethod
    def classify_line(cls, line: str) -> DiffLineKind:
        if line.startswith(cls._HEADER_PREFIXES):
            return DiffLineKind.HEADER
        if line.startswith("@@"):
            return DiffLineKind.HUNK
        if line.startswith("+"):
            return DiffLineKind.ADDITION
        if line.startswith("-"):
            return DiffLineKind.DELETION
        return DiffLineKind.CONTEXT

    @classmethod
    def parse(cls, raw: str) -> DiffResult:
        lines: list[DiffLine] = []
        old_line: int | None = None
        new_line: int | None = None

        for text in raw.split("\n"):
            kind = cls.classify_line(text)

            if kind == DiffLineKind.HUNK:
                header = cls.parse_hunk_header(text)
                if header is not None:
                    old_line = header.old_start
                    new_line = header.new_start
                lines.append(DiffLine(kind, text))

            elif kind == DiffLineKind.ADDITION:
                lines.append(DiffLine(kind, text, new_line_number=new_line))
                new_line = _advance(new_line)

            elif kind == DiffLineKind.DELETION:
                lines.append(DiffLine(kind, text, old_line_number=old_line))
                old_line = _advance(old_line)

            elif kind == DiffLineKind.CONTEXT:
                lines.append(
                    DiffLine(
                        kind,
                        text,
                        old_line_number=old_line,
                        new_line_number=new_line,
                    )
                )
                old_line = _advance(old_line)
                new_line = _advance(new_line)

            else:
                lines.append(DiffLine(kind, text))

        return DiffResult(raw=raw, lines=tuple(lines))

    @classmethod
    def file_path_from_header(cls, line: str) -> str | None:
        """Path on the `b/` side of a `diff --git` line."""
        match = cls._DIFF_GIT_RE.match(line)
        return match.group(2) if match else None

    @classmethod
    def count_hunks_per_file(cls, raw: str) -> dict[str, int]:
        counts: dict[str, int] = {}
        current: str | None = None

        for line in raw.split("\n"):
            if line.startswith("diff --git"):
                current = cls.file_path_from_header(line)
                if current is not None:
                    counts.setdefault(current, 0)
            elif line.startswith("@@") and current is not None:
                counts[current] += 1

        return counts

    @classmethod
    def split_file_diffs(cls, raw: str) -> list[tuple[str, str]]:
        """
        Split a multi-file diff into (path, section) pairs.

        Each section is the verbatim slice of `raw` from its `diff --git`
        line up to the next one, line terminators included.
        """
        sections: list[tuple[str, str]] = []
        current_path: str | None = None
        current: list[str] = []

        for line in raw.splitlines(keepends=True):
            if line.startswith("diff --git"):
                if current_path is not None:
                    sections.append((current_path, "".join(current)))
                current_path = cls.file_path_from_header(line.rstrip("\r\n")) or ""
                current = [line]
            elif current_path is not None:
                current.append(line)

        if current_path is not None:
            sections.append((current_path, "".join(current)))

        return sections

    @staticmethod
    def synthesize_untracked_diff(path: str, content: str) -> str:
        """
        Build an all-additions diff for a file git has no index entry for.

        The result is a valid patch: `git apply --cached` accepts it as a
        new file.
        """
        header = [
            f"diff --git a/{path} b/{path}",
            "new file mode 100644",
            "--- /dev/null",
            f"+++ b/{path}",
        ]
        if not content:
            return "\n".join(header[:2]) + "\n"

        body = content.split("\n")
        missing_newline = body[-1] != ""
        if not missing_newline:
            body = body[:-1]

        lines = header + [f"@@ -0,0 +1,{len(body)} @@"]
        lines.extend("+" + line for line in body)
        if missing_newline:
            lines.append("\\ No newline at end of file")

        return "\n".join(lines) + "\n"

    @staticmethod
    def synthesize_binary_diff(path: str) -> str:
        """The header git prints for a new binary file, no hunks."""
        return (
            f"diff --git a/{path} b/{path}\n"
            "new file mode 100644\n"
            f"Binary files /dev/null and b/{path} differ\n"
        )


def _advance(counter: int | None) -> int | None:
    return counter + 1 if counter is not None else None


def parse_diff(raw: str) -> DiffResult:
    return DiffParser.parse(raw)
