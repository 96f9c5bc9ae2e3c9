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
from unittest.mock import AsyncMock, Mock

import pytest

from gitstage.core.data.diff import DiffResult
from gitstage.core.data.selection import FileCategory, SelectionAnchor
from gitstage.core.data.status import BranchInfo, FileEntry, FileStatus, RepoStatus
from gitstage.core.diff.diff_parser import parse_diff
from gitstage.core.selection.staging_operations import StagingOperations
from gitstage.core.state.git_state_manager import GitStateManager
from gitstage.core.state.working_tree import WorkingTreeState

MODIFIED = FileEntry("a.py", FileStatus.MODIFIED, staged=False)
UNTRACKED = FileEntry("new.txt", FileStatus.UNTRACKED, staged=False)
STAGED = FileEntry("b.py", FileStatus.MODIFIED, staged=True)

RAW = (
    "diff --git a/a.py b/a.py\n"
    "--- a/a.py\n"
    "+++ b/a.py\n"
    "@@ -1 +1 @@\n"
    "-x\n"
    "+y\n"
    "@@ -9 +9 @@\n"
    "-p\n"
    "+q\n"
)


def _manager(selected=None, diff=None):
    manager = Mock(spec=GitStateManager)
    manager.state = WorkingTreeState(
        status=RepoStatus(files=(STAGED, UNTRACKED, MODIFIED), branch=BranchInfo("main"), is_repo=True),
        selected_file=selected,
        diff=diff,
    )
    for name in ("stage", "unstage", "stage_all", "unstage_all", "stage_hunk", "unstage_hunk"):
        setattr(manager, name, AsyncMock(return_value=True))
    return manager


@pytest.fixture
def selection():
    return {"index": 0, "hunk": 0}


def _ops(manager, selection):
    return StagingOperations(
        lambda: manager, lambda: selection["index"], lambda: selection["hunk"]
    )


def test_stage_selected_captures_anchor(selection):
    manager = _manager()
    ops = _ops(manager, selection)

    assert asyncio.run(ops.stage_selected())

    manager.stage.assert_awaited_once_with(MODIFIED)
    assert ops.has_pending_anchor
    assert ops.consume_pending_anchor() == SelectionAnchor(FileCategory.MODIFIED, 0)
    # consumed exactly once
    assert ops.consume_pending_anchor() is None


def test_stage_all_captures_anchor(selection):
    manager = _manager()
    selection["index"] = 1
    ops = _ops(manager, selection)

    assert asyncio.run(ops.stage_all())

    manager.stage_all.assert_awaited_once_with()
    assert ops.consume_pending_anchor() == SelectionAnchor(FileCategory.UNTRACKED, 0)


def test_unstage_all_captures_anchor(selection):
    manager = _manager()
    selection["index"] = 2
    ops = _ops(manager, selection)

    assert asyncio.run(ops.unstage_all())

    manager.unstage_all.assert_awaited_once_with()
    assert ops.consume_pending_anchor() == SelectionAnchor(FileCategory.STAGED, 0)


def test_stage_selected_ignores_staged_entry(selection):
    manager = _manager()
    selection["index"] = 2
    ops = _ops(manager, selection)

    assert not asyncio.run(ops.stage_selected())
    manager.stage.assert_not_awaited()
    assert not ops.has_pending_anchor


def test_unstage_selected(selection):
    manager = _manager()
    selection["index"] = 2
    ops = _ops(manager, selection)

    assert asyncio.run(ops.unstage_selected())
    manager.unstage.assert_awaited_once_with(STAGED)


def test_toggle_by_index_anchors_on_highlighted_row(selection):
    manager = _manager()
    selection["index"] = 1
    ops = _ops(manager, selection)

    assert asyncio.run(ops.toggle_file_by_index(2))

    manager.unstage.assert_awaited_once_with(STAGED)
    assert ops.consume_pending_anchor() == SelectionAnchor(FileCategory.UNTRACKED, 0)


def test_toggle_out_of_range(selection):
    manager = _manager()
    ops = _ops(manager, selection)
    assert not asyncio.run(ops.toggle_file_by_index(9))


def test_without_manager_everything_is_a_no_op(selection):
    ops = StagingOperations(lambda: None, lambda: 0)
    assert not asyncio.run(ops.stage_selected())
    assert not asyncio.run(ops.toggle_selected())
    assert not asyncio.run(ops.stage_all())
    assert not asyncio.run(ops.toggle_current_hunk())


def test_toggle_hunk_stages_extracted_patch(selection):
    manager = _manager(selected=MODIFIED, diff=parse_diff(RAW))
    selection["hunk"] = 1
    ops = _ops(manager, selection)

    assert asyncio.run(ops.toggle_current_hunk())

    patch = manager.stage_hunk.await_args.args[0]
    assert "@@ -9 +9 @@" in patch
    assert "@@ -1 +1 @@" not in patch
    assert ops.consume_pending_hunk_index() == 1


def test_toggle_hunk_unstages_on_staged_side(selection):
    manager = _manager(selected=STAGED, diff=parse_diff(RAW.replace("a.py", "b.py")))
    selection["index"] = 2
    ops = _ops(manager, selection)

    assert asyncio.run(ops.toggle_current_hunk())
    manager.unstage_hunk.assert_awaited_once()


def test_toggle_hunk_out_of_range_does_nothing(selection):
    manager = _manager(selected=MODIFIED, diff=parse_diff(RAW))
    selection["hunk"] = 5
    ops = _ops(manager, selection)

    assert not asyncio.run(ops.toggle_current_hunk())
    manager.stage_hunk.assert_not_awaited()
    assert not ops.has_pending_anchor


def test_toggle_hunk_on_untracked_stages_file(selection):
    manager = _manager(selected=UNTRACKED, diff=DiffResult.empty())
    selection["index"] = 1
    ops = _ops(manager, selection)

    assert asyncio.run(ops.toggle_current_hunk())
    manager.stage.assert_awaited_once_with(UNTRACKED)
    manager.stage_hunk.assert_not_awaited()
