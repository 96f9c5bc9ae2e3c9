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
from dataclasses import replace
from pathlib import Path

from loguru import logger

from gitstage.constants import DEFAULT_CHECK_IGNORE_BATCH_SIZE
from gitstage.core.data.history import CommitInfo
from gitstage.core.data.status import (
    FileEntry,
    FileStatus,
    LocalBranch,
    RepoStatus,
    StashEntry,
)
from gitstage.core.exceptions import GitError, PatchApplyError
from gitstage.core.git_commands.status_parser import (
    LOG_FORMAT,
    build_file_entries,
    count_nonempty_lines,
    parse_log,
    parse_numstat,
    parse_porcelain_status,
    parse_stash_list,
)
from gitstage.core.git_interface.interface import GitInterface

_DIFF_FLAGS = ["--no-color", "--no-ext-diff"]

# non-ASCII paths appear as-is in diff headers instead of as C-quoted octal
_UNQUOTED_PATHS = ["-c", "core.quotePath=false"]

# patch text keeps bytes that are not UTF-8 as lone surrogates, so a hunk
# sliced out of it encodes back to exactly what git printed
PATCH_ENCODING = "utf-8"
PATCH_ERRORS = "surrogateescape"

# git treats a file as binary when a NUL shows up in its first 8000 bytes
_BINARY_SNIFF_SIZE = 8000


def decode_patch(data: bytes) -> str:
    return data.decode(PATCH_ENCODING, errors=PATCH_ERRORS)


def encode_patch(text: str) -> bytes:
    return text.encode(PATCH_ENCODING, errors=PATCH_ERRORS)


def looks_binary(data: bytes) -> bool:
    return b"\0" in data[:_BINARY_SNIFF_SIZE]

_BASE_BRANCH_CANDIDATES = ("main", "master", "develop")


class GitCommands:
    """
    Typed git operations for one repository.

    Read operations that have a sensible empty answer (log, stash list,
    branch lists) swallow git failures and return it; everything that
    changes the repository raises GitError with git's stderr.
    """

    def __init__(self, git: GitInterface):
        self.git = git

    @property
    def repo_path(self) -> Path:
        return self.git.repo_path

    # -----------------------------------------------------------------
    # repository checks
    # -----------------------------------------------------------------

    async def is_repo(self) -> bool:
        try:
            result = await self.git.run_git_text(["rev-parse", "--is-inside-work-tree"])
        except GitError:
            return False
        return result.ok and result.stdout.strip() == "true"

    async def has_commits(self) -> bool:
        result = await self.git.run_git_text(["rev-parse", "--verify", "--quiet", "HEAD"])
        return result.ok

    async def git_dir(self) -> Path | None:
        result = await self.git.run_git_text(["rev-parse", "--absolute-git-dir"])
        if not result.ok:
            return None
        return Path(result.stdout.strip())

    async def toplevel(self) -> Path | None:
        result = await self.git.run_git_text(["rev-parse", "--show-toplevel"])
        if not result.ok:
            return None
        return Path(result.stdout.strip())

    # -----------------------------------------------------------------
    # status
    # -----------------------------------------------------------------

    async def status(
        self, check_ignore_batch_size: int = DEFAULT_CHECK_IGNORE_BATCH_SIZE
    ) -> RepoStatus:
        """
        Full working tree status: porcelain status, ignore filtering,
        numstat insertion/deletion counts and line counts for untracked
        files.

        Only a path that is not inside a work tree reads as "not a
        repository". Any other git failure raises GitError.
        """
        if not await self.is_repo():
            return RepoStatus.not_a_repo()

        output = await self.git.run_git_text_out(
            ["status", "--porcelain=v1", "--branch", "-z", "--untracked-files=all"]
        )
        branch, entries = parse_porcelain_status(output)

        untracked = [e.path for e in entries if e.working_dir == "?"]
        ignored = await self.check_ignore(untracked, check_ignore_batch_size)
        files = build_file_entries(entries, ignored)

        staged_raw, unstaged_raw = await asyncio.gather(
            self.numstat(staged=True), self.numstat(staged=False)
        )
        files = await self._with_line_stats(
            files, parse_numstat(staged_raw), parse_numstat(unstaged_raw)
        )

        return RepoStatus(files=tuple(files), branch=branch, is_repo=True)

    async def _with_line_stats(self, files, staged_stats, unstaged_stats) -> list[FileEntry]:
        result: list[FileEntry] = []
        for entry in files:
            if entry.status == FileStatus.UNTRACKED:
                lines = await self._count_file_lines(entry.path)
                result.append(_replace_stats(entry, lines, 0))
                continue

            stats = (staged_stats if entry.staged else unstaged_stats).get(entry.path)
            if stats is not None:
                entry = _replace_stats(entry, stats.insertions, stats.deletions)
            result.append(entry)
        return result

    async def _count_file_lines(self, path: str) -> int:
        try:
            data = await self.read_worktree_file(path)
        except OSError:
            return 0
        if looks_binary(data):
            return 0
        return count_nonempty_lines(decode_patch(data))

    async def read_worktree_file(self, path: str) -> bytes:
        full_path = self.repo_path / path
        return await asyncio.to_thread(full_path.read_bytes)

    async def check_ignore(
        self, paths: list[str], batch_size: int = DEFAULT_CHECK_IGNORE_BATCH_SIZE
    ) -> set[str]:
        """Paths git would ignore, asked in batches to stay under argv limits."""
        ignored: set[str] = set()
        for start in range(0, len(paths), batch_size):
            batch = paths[start : start + batch_size]
            # exit code 1 just means nothing in the batch is ignored
            result = await self.git.run_git_text(["check-ignore", "-z", "--", *batch])
            if result.returncode not in (0, 1):
                logger.warning(f"check-ignore failed: {result.stderr.strip()}")
                continue
            ignored.update(path for path in result.stdout.split("\0") if path)
        return ignored

    # -----------------------------------------------------------------
    # diffs
    # -----------------------------------------------------------------

    async def _diff_out(self, args: list[str]) -> str:
        return decode_patch(await self.git.run_git_binary_out([*_UNQUOTED_PATHS, *args]))

    async def diff(self, path: str | None = None, staged: bool = False) -> str:
        args = ["diff", *_DIFF_FLAGS]
        if staged:
            args.append("--cached")
        if path:
            args.extend(["--", path])
        return await self._diff_out(args)

    async def numstat(self, staged: bool = False) -> str:
        """`--numstat -z` output: a rename names both paths in their own records."""
        args = ["diff", "--numstat", "-z", *_DIFF_FLAGS]
        if staged:
            args.append("--cached")
        try:
            return await self.git.run_git_text_out(args)
        except GitError:
            return ""

    async def commit_diff(self, commit_hash: str) -> str:
        return await self._diff_out(
            ["diff-tree", "--no-commit-id", "-p", "-r", "--root", "-M", *_DIFF_FLAGS, commit_hash]
        )

    async def merge_base(self, ref: str, other: str = "HEAD") -> str:
        return (await self.git.run_git_text_out(["merge-base", ref, other])).strip()

    async def diff_between_refs(self, base: str, target: str | None = "HEAD") -> str:
        args = ["diff", *_DIFF_FLAGS, "-M", base]
        if target:
            args.append(target)
        return await self._diff_out(args)

    # -----------------------------------------------------------------
    # index mutations
    # -----------------------------------------------------------------

    async def add(self, paths: list[str]) -> None:
        await self.git.run_git_text_out(["add", "--", *paths])

    async def add_all(self) -> None:
        await self.git.run_git_text_out(["add", "-A"])

    async def reset(self, paths: list[str] | None = None) -> None:
        if not await self.has_commits():
            # no HEAD to reset to, drop the entries from the index instead
            args = ["rm", "--cached", "-r", "--quiet"]
            args += ["--", *paths] if paths else ["--", "."]
            await self.git.run_git_text_out(args)
            return

        args = ["reset", "--quiet", "HEAD"]
        if paths:
            args += ["--", *paths]
        await self.git.run_git_text_out(args)

    async def checkout(self, paths: list[str]) -> None:
        await self.git.run_git_text_out(["checkout", "--", *paths])

    async def commit(self, message: str, amend: bool = False) -> None:
        args = ["commit", "-m", message]
        if amend:
            args.append("--amend")
        await self.git.run_git_text_out(args)

    async def apply_patch(
        self,
        patch: str,
        cached: bool = True,
        reverse: bool = False,
        unidiff_zero: bool = True,
        check: bool = False,
    ) -> None:
        args = ["apply"]
        if check:
            args.append("--check")
        if cached:
            args.append("--cached")
        if reverse:
            args.append("--reverse")
        if unidiff_zero:
            args.append("--unidiff-zero")
        args.append("-")

        result = await self.git.run_git_binary(args, input_bytes=encode_patch(patch))
        if not result.ok:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.error(f"git apply failed: {stderr}")
            raise PatchApplyError(stderr or "git apply failed", patch)

    # -----------------------------------------------------------------
    # history
    # -----------------------------------------------------------------

    async def log(self, count: int = 100, revision_range: str | None = None) -> list[CommitInfo]:
        args = ["log", f"--format={LOG_FORMAT}"]
        if count:
            args.append(f"-n{count}")
        if revision_range:
            args.append(revision_range)
        result = await self.git.run_git_text(args)
        if not result.ok:
            return []
        return parse_log(result.stdout)

    async def head_message(self) -> str:
        result = await self.git.run_git_text(["log", "-1", "--format=%B"])
        return result.stdout.strip() if result.ok else ""

    async def default_base_branch(self) -> str | None:
        result = await self.git.run_git_text(
            ["symbolic-ref", "--quiet", "--short", "refs/remotes/origin/HEAD"]
        )
        if result.ok and result.stdout.strip():
            return result.stdout.strip()

        for prefix in ("", "origin/"):
            for name in _BASE_BRANCH_CANDIDATES:
                ref = f"{prefix}{name}"
                check = await self.git.run_git_text(["rev-parse", "--verify", "--quiet", ref])
                if check.ok:
                    return ref
        return None

    async def candidate_base_branches(self) -> list[str]:
        result = await self.git.run_git_text(
            ["branch", "-a", "--format=%(refname:short)"]
        )
        if not result.ok:
            return []
        current = await self.current_branch()
        names = []
        for name in result.stdout.split("\n"):
            name = name.strip()
            if not name or name == current or name.endswith("/HEAD") or name == "origin":
                continue
            names.append(name)
        return names

    async def current_branch(self) -> str | None:
        result = await self.git.run_git_text(["branch", "--show-current"])
        if not result.ok:
            return None
        return result.stdout.strip() or None

    # -----------------------------------------------------------------
    # stash / branches / undo / remotes
    # -----------------------------------------------------------------

    async def stash_list(self) -> list[StashEntry]:
        result = await self.git.run_git_text(["stash", "list", "--format=%gs"])
        return parse_stash_list(result.stdout) if result.ok else []

    async def stash_save(self, message: str | None = None) -> str:
        args = ["stash", "push"]
        if message:
            args += ["-m", message]
        await self.git.run_git_text_out(args)
        return "Stashed"

    async def stash_pop(self, index: int = 0) -> str:
        await self.git.run_git_text_out(["stash", "pop", f"stash@{{{index}}}"])
        return "Stash popped"

    async def local_branches(self) -> list[LocalBranch]:
        result = await self.git.run_git_text(
            ["branch", "--format=%(HEAD)%00%(refname:short)%00%(upstream:short)"]
        )
        if not result.ok:
            return []
        branches = []
        for line in result.stdout.split("\n"):
            if not line:
                continue
            head, name, upstream = (line.split("\0") + ["", "", ""])[:3]
            branches.append(
                LocalBranch(name=name, current=head == "*", tracking=upstream or None)
            )
        return branches

    async def switch_branch(self, name: str) -> str:
        await self.git.run_git_text_out(["checkout", name])
        return f"Switched to {name}"

    async def create_branch(self, name: str) -> str:
        await self.git.run_git_text_out(["checkout", "-b", name])
        return f"Created {name}"

    async def soft_reset(self, count: int = 1) -> str:
        await self.git.run_git_text_out(["reset", "--soft", f"HEAD~{count}"])
        return "Reset done"

    async def cherry_pick(self, commit_hash: str) -> str:
        await self.git.run_git_text_out(["cherry-pick", commit_hash])
        return "Cherry-picked"

    async def revert(self, commit_hash: str) -> str:
        await self.git.run_git_text_out(["revert", "--no-edit", commit_hash])
        return "Reverted"

    async def push(self) -> str:
        result = await self.git.run_git_text(["push"])
        if not result.ok:
            raise GitError(result.stderr.strip() or "push failed")
        # git reports push progress on stderr
        return result.stderr.strip().split("\n")[-1] if result.stderr.strip() else "Pushed"

    async def fetch(self) -> str:
        await self.git.run_git_text_out(["fetch"])
        return "Fetch complete"

    async def pull_rebase(self) -> str:
        output = await self.git.run_git_text_out(["pull", "--rebase"])
        return output.strip().split("\n")[-1] if output.strip() else "Already up-to-date"


def _replace_stats(entry: FileEntry, insertions: int, deletions: int) -> FileEntry:
    return replace(entry, insertions=insertions, deletions=deletions)
