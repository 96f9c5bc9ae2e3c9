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

"""Pure parsers for git's machine-readable output. No subprocesses in here."""

import re
from dataclasses import dataclass
from datetime import datetime

from gitstage.core.data.history import CommitInfo
from gitstage.core.data.status import BranchInfo, FileEntry, FileStatus, StashEntry

LOG_FIELD_SEP = "\x1f"
LOG_RECORD_SEP = "\x1e"
LOG_FORMAT = f"%H{LOG_FIELD_SEP}%an{LOG_FIELD_SEP}%aI{LOG_FIELD_SEP}%D{LOG_FIELD_SEP}%s{LOG_RECORD_SEP}"

_BRANCH_RE = re.compile(
    r"^## (?:No commits yet on |Initial commit on )?(?P<current>.+?)"
    r"(?:\.\.\.(?P<tracking>\S+))?(?: \[(?P<info>[^\]]+)\])?$"
)
_AHEAD_RE = re.compile(r"ahead (\d+)")
_BEHIND_RE = re.compile(r"behind (\d+)")

_STATUS_CODES = {
    "M": FileStatus.MODIFIED,
    "A": FileStatus.ADDED,
    "D": FileStatus.DELETED,
    "?": FileStatus.UNTRACKED,
    "R": FileStatus.RENAMED,
    "C": FileStatus.COPIED,
}


@dataclass(frozen=True)
class PorcelainEntry:
    index: str
    working_dir: str
    path: str
    original_path: str | None = None


@dataclass(frozen=True)
class NumstatEntry:
    insertions: int
    deletions: int


def parse_status_code(code: str) -> FileStatus:
    # T (type change), U (unmerged) and anything unknown read as modified
    return _STATUS_CODES.get(code, FileStatus.MODIFIED)


def parse_branch_line(line: str) -> BranchInfo:
    if line.startswith("## HEAD (no branch)"):
        return BranchInfo(current="HEAD")

    match = _BRANCH_RE.match(line)
    if not match:
        return BranchInfo(current="HEAD")

    info = match.group("info") or ""
    ahead = _AHEAD_RE.search(info)
    behind = _BEHIND_RE.search(info)
    return BranchInfo(
        current=match.group("current"),
        tracking=match.group("tracking"),
        ahead=int(ahead.group(1)) if ahead else 0,
        behind=int(behind.group(1)) if behind else 0,
    )


def parse_porcelain_status(output: str) -> tuple[BranchInfo, list[PorcelainEntry]]:
    """
    Parse `git status --porcelain=v1 --branch -z`.

    Records are NUL separated; a rename or copy is followed by an extra
    record holding the source path.
    """
    branch = BranchInfo(current="HEAD")
    entries: list[PorcelainEntry] = []

    records = output.split("\0")
    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        if not record:
            continue

        if record.startswith("## "):
            branch = parse_branch_line(record)
            continue

        if len(record) < 4:
            continue

        x, y, path = record[0], record[1], record[3:]
        original_path = None
        if x in "RC" or y in "RC":
            if i < len(records):
                original_path = records[i]
                i += 1

        entries.append(PorcelainEntry(x, y, path, original_path))

    return branch, entries


def build_file_entries(
    entries: list[PorcelainEntry], ignored: set[str] | frozenset[str] = frozenset()
) -> list[FileEntry]:
    """
    Expand porcelain entries into the dual staged/unstaged entry list.

    A path yields at most one staged and at most one unstaged entry.
    """
    files: list[FileEntry] = []
    seen: set[tuple[str, bool]] = set()

    for entry in entries:
        if entry.index == "!" or entry.working_dir == "!" or entry.path in ignored:
            continue

        if entry.index not in (" ", "?"):
            key = (entry.path, True)
            if key not in seen:
                seen.add(key)
                files.append(
                    FileEntry(
                        path=entry.path,
                        status=parse_status_code(entry.index),
                        staged=True,
                        original_path=entry.original_path,
                    )
                )

        if entry.working_dir != " ":
            key = (entry.path, False)
            if key not in seen:
                seen.add(key)
                status = (
                    FileStatus.UNTRACKED
                    if entry.working_dir == "?"
                    else parse_status_code(entry.working_dir)
                )
                files.append(FileEntry(path=entry.path, status=status, staged=False))

    return files


def parse_numstat(output: str) -> dict[str, NumstatEntry]:
    """
    Parse `git diff --numstat -z`, keyed by the path the file has now.

    A rename or copy record has an empty path field and is followed by
    two records holding the source and destination paths.
    """
    stats: dict[str, NumstatEntry] = {}
    records = output.split("\0")
    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        parts = record.split("\t", 2)
        if len(parts) < 3:
            continue

        added, removed, path = parts
        if not path:
            if i + 1 >= len(records):
                break
            path = records[i + 1]
            i += 2

        # binary files report "-" for both counts
        insertions = 0 if added == "-" else int(added)
        deletions = 0 if removed == "-" else int(removed)
        stats[path] = NumstatEntry(insertions, deletions)
    return stats


def parse_log(output: str) -> list[CommitInfo]:
    commits: list[CommitInfo] = []
    for record in output.split(LOG_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(LOG_FIELD_SEP)
        if len(fields) < 5:
            continue
        commit_hash, author, date, refs, subject = fields[:5]
        commits.append(
            CommitInfo(
                hash=commit_hash,
                short_hash=commit_hash[:7],
                message=subject,
                author=author,
                date=datetime.fromisoformat(date),
                refs=refs,
            )
        )
    return commits


def parse_stash_list(output: str) -> list[StashEntry]:
    return [
        StashEntry(index=i, message=line)
        for i, line in enumerate(line for line in output.split("\n") if line)
    ]


def count_nonempty_lines(content: str) -> int:
    return sum(1 for line in content.split("\n") if line)
