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

"""Rich renderables for diffs, file lists and commit logs."""

from collections.abc import Sequence

from rich.table import Table
from rich.text import Text

from gitstage.core.data.diff import DiffLine, DiffLineKind, DiffResult, WordDiffSegment
from gitstage.core.data.history import CommitInfo
from gitstage.core.data.selection import CATEGORY_ORDER, FileCategory
from gitstage.core.data.status import FileEntry, FileStatus, HunkCount, RepoStatus
from gitstage.core.diff.word_diff import WordDiffEngine
from gitstage.core.selection.file_categories import categorize_files

STYLES = {
    DiffLineKind.HEADER: "bold blue",
    DiffLineKind.HUNK: "cyan",
    DiffLineKind.ADDITION: "green",
    DiffLineKind.DELETION: "red",
    DiffLineKind.CONTEXT: "dim",
}
EMPHASIS = {
    DiffLineKind.ADDITION: "bold white on dark_green",
    DiffLineKind.DELETION: "bold white on dark_red",
}
GUTTER_STYLE = "grey50"

STATUS_LETTERS = {
    FileStatus.MODIFIED: "M",
    FileStatus.ADDED: "A",
    FileStatus.DELETED: "D",
    FileStatus.UNTRACKED: "?",
    FileStatus.RENAMED: "R",
    FileStatus.COPIED: "C",
}

SECTION_TITLES = {
    FileCategory.MODIFIED: "Modified",
    FileCategory.UNTRACKED: "Untracked",
    FileCategory.STAGED: "Staged",
}


def _printable(text: str) -> str:
    # bytes that were not UTF-8 ride along as surrogates, show them as U+FFFD
    return text.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="replace")


def _gutter(line: DiffLine) -> Text:
    old = "" if line.old_line_number is None else str(line.old_line_number)
    new = "" if line.new_line_number is None else str(line.new_line_number)
    return Text(f"{old:>5} {new:>5} │ ", style=GUTTER_STYLE)


def _segments_text(marker: str, segments: Sequence[WordDiffSegment], kind: DiffLineKind) -> Text:
    text = Text(marker, style=STYLES[kind])
    for segment in segments:
        text.append(_printable(segment.text), style=EMPHASIS[kind] if segment.changed else STYLES[kind])
    return text


def diff_text(diff: DiffResult, engine: WordDiffEngine | None = None, line_numbers: bool = True) -> Text:
    """The whole diff as one Text, with word-level emphasis on paired modifications."""
    engine = engine if engine is not None else WordDiffEngine()
    pairs = engine.find_modification_pairs(diff.lines)

    # split("\n") leaves an empty last line for newline-terminated input
    lines = diff.lines
    if lines and lines[-1].text == "" and lines[-1].kind == DiffLineKind.CONTEXT:
        lines = lines[:-1]

    out = Text()
    for i, line in enumerate(lines):
        if line_numbers and line.kind not in (DiffLineKind.HEADER, DiffLineKind.HUNK):
            out.append_text(_gutter(line))

        pair = pairs.get(i)
        if pair is not None and i == pair.deletion_index:
            out.append_text(_segments_text("-", pair.old_segments, DiffLineKind.DELETION))
        elif pair is not None and i == pair.addition_index:
            out.append_text(_segments_text("+", pair.new_segments, DiffLineKind.ADDITION))
        else:
            out.append(_printable(line.text), style=STYLES[line.kind])
        out.append("\n")
    return out


def status_table(status: RepoStatus, hunk_counts: dict[str, HunkCount] | None = None) -> Table:
    branch = status.branch
    title = branch.current or "(no branch)"
    if branch.tracking:
        title += f" → {branch.tracking}"
    if branch.ahead or branch.behind:
        title += f" [↑{branch.ahead} ↓{branch.behind}]"

    table = Table(title=title, show_header=True, header_style="bold", expand=False)
    table.add_column("#", justify="right", style=GUTTER_STYLE)
    table.add_column("", width=1)
    table.add_column("Path")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")
    table.add_column("Hunks", justify="right", style="cyan")

    categorized = categorize_files(status.files)
    index = 0
    for category in CATEGORY_ORDER:
        entries = categorized.files_in(category)
        if not entries:
            continue
        table.add_section()
        table.add_row("", "", Text(f"{SECTION_TITLES[category]} ({len(entries)})", style="bold"), "", "", "")
        for entry in entries:
            table.add_row(*_entry_row(index, entry, hunk_counts or {}))
            index += 1
    return table


def _entry_row(index: int, entry: FileEntry, hunk_counts: dict[str, HunkCount]) -> list:
    path = entry.path
    if entry.original_path:
        path = f"{entry.original_path} → {entry.path}"
    counts = hunk_counts.get(entry.path)
    hunks = ""
    if counts is not None:
        hunks = str(counts.staged if entry.staged else counts.unstaged)
    return [
        str(index),
        STATUS_LETTERS[entry.status],
        path,
        "" if entry.insertions is None else str(entry.insertions),
        "" if entry.deletions is None else str(entry.deletions),
        hunks,
    ]


def log_table(commits: Sequence[CommitInfo]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Commit", style="yellow")
    table.add_column("Date", style=GUTTER_STYLE)
    table.add_column("Author", style="cyan")
    table.add_column("Message")
    for commit in commits:
        message = Text(commit.message)
        if commit.refs:
            message = Text(f"({commit.refs}) ", style="bold magenta") + message
        table.add_row(commit.short_hash, commit.date.strftime("%Y-%m-%d %H:%M"), commit.author, message)
    return table
