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
from unittest.mock import AsyncMock

import pytest

from gitstage.core.data.selection import CommitSelection, FileSelection
from gitstage.core.data.status import FileStatus
from gitstage.core.exceptions import GitError
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.git_commands.status_parser import parse_log
from gitstage.core.state.compare_manager import CompareManager, build_compare_files
from gitstage.core.state.operation_queue import GitOperationQueue

BRANCH_DIFF = (
    "diff --git a/app.py b/app.py\n"
    "index 1111111..2222222 100644\n"
    "--- a/app.py\n"
    "+++ b/app.py\n"
    "@@ -1,2 +1,2 @@\n"
    "-old\n"
    "+new\n"
    " same\n"
    "diff --git a/added.py b/added.py\n"
    "new file mode 100644\n"
    "index 0000000..3333333\n"
    "--- /dev/null\n"
    "+++ b/added.py\n"
    "@@ -0,0 +1,2 @@\n"
    "+one\n"
    "+two\n"
    "diff --git a/gone.py b/gone.py\n"
    "deleted file mode 100644\n"
    "index 4444444..0000000\n"
    "--- a/gone.py\n"
    "+++ /dev/null\n"
    "@@ -1 +0,0 @@\n"
    "-bye\n"
    "diff --git a/before.py b/after.py\n"
    "similarity index 100%\n"
    "rename from before.py\n"
    "rename to after.py\n"
)

COMMITS = parse_log(
    "c0ffee0000\x1fAda\x1f2025-05-01T00:00:00+00:00\x1f\x1fWork on branch\x1e\n"
)


@pytest.fixture
def commands():
    commands = AsyncMock(spec=GitCommands)
    commands.default_base_branch.return_value = "main"
    commands.merge_base.return_value = "abc1234"
    commands.log.return_value = COMMITS
    commands.diff_between_refs.return_value = BRANCH_DIFF
    commands.commit_diff.return_value = BRANCH_DIFF
    commands.candidate_base_branches.return_value = ["main", "origin/main"]
    return commands


@pytest.fixture
def compare(commands):
    return CompareManager(commands, GitOperationQueue())


def test_build_compare_files():
    files = build_compare_files(BRANCH_DIFF)

    assert [(f.path, f.status) for f in files] == [
        ("app.py", FileStatus.MODIFIED),
        ("added.py", FileStatus.ADDED),
        ("gone.py", FileStatus.DELETED),
        ("after.py", FileStatus.RENAMED),
    ]
    assert (files[0].additions, files[0].deletions) == (1, 1)
    assert (files[1].additions, files[1].deletions) == (2, 0)
    assert (files[2].additions, files[2].deletions) == (0, 1)
    assert (files[3].additions, files[3].deletions) == (0, 0)


def test_refresh_uses_default_base(compare, commands):
    asyncio.run(compare.refresh_compare_diff())

    result = compare.state.compare_diff
    assert compare.is_loaded
    assert result.base_branch == "main"
    assert result.merge_base == "abc1234"
    assert result.commits == tuple(COMMITS)
    assert len(result.files) == 4
    assert (result.total_additions, result.total_deletions) == (3, 2)
    commands.log.assert_awaited_once_with(0, "abc1234..HEAD")
    commands.diff_between_refs.assert_awaited_once_with("abc1234", "HEAD")


def test_include_uncommitted_targets_working_tree(compare, commands):
    asyncio.run(compare.refresh_compare_diff(include_uncommitted=True))

    commands.diff_between_refs.assert_awaited_once_with("abc1234", None)
    assert compare.state.include_uncommitted


def test_explicit_base_branch(compare, commands):
    asyncio.run(compare.set_base_branch("develop"))

    commands.default_base_branch.assert_not_awaited()
    commands.merge_base.assert_awaited_once_with("develop")
    assert compare.state.base_branch == "develop"


def test_no_base_branch(compare, commands):
    commands.default_base_branch.return_value = None

    asyncio.run(compare.refresh_compare_diff())

    assert compare.state.error == "Failed to load compare diff: No base branch found"
    assert not compare.is_loaded
    assert not compare.state.is_loading


def test_git_failure_is_reported(compare, commands):
    commands.merge_base.side_effect = GitError("fatal: no merge base")

    asyncio.run(compare.refresh_compare_diff())
    assert compare.state.error == "Failed to load compare diff: fatal: no merge base"


def test_reset_base_branch(compare):
    asyncio.run(compare.refresh_compare_diff())
    compare.reset_base_branch()

    assert not compare.is_loaded
    assert compare.state.compare_diff is None


def test_refresh_if_loaded(compare, commands):
    asyncio.run(compare.refresh_if_loaded())
    commands.merge_base.assert_not_awaited()

    async def main():
        await compare.refresh_compare_diff()
        await compare.refresh_if_loaded()

    asyncio.run(main())
    assert commands.merge_base.await_count == 2


def test_select_file_and_commit(compare, commands):
    asyncio.run(compare.refresh_compare_diff())

    compare.select_file(1)
    assert compare.state.selection == FileSelection(1)
    assert compare.state.selected_diff == compare.state.compare_diff.files[1].diff

    asyncio.run(compare.select_commit(0))
    assert compare.state.selection == CommitSelection(0)
    assert compare.state.selected_diff.raw == BRANCH_DIFF
    commands.commit_diff.assert_awaited_once_with("c0ffee0000")

    compare.select_file(99)
    assert compare.state.selection is None
    assert compare.state.selected_diff is None


def test_candidate_base_branches(compare):
    assert asyncio.run(compare.get_candidate_base_branches()) == ["main", "origin/main"]
