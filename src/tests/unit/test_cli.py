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

import pytest
from typer.testing import CliRunner

from gitstage.cli import app

runner = CliRunner()


@pytest.fixture
def dirty_repo(committed_repo):
    lines = [f"line {i}\n" for i in range(1, 31)]
    lines[1] = "line 2 changed\n"
    lines[24] = "line 25 changed\n"
    (committed_repo / "app.py").write_text("".join(lines))
    (committed_repo / "notes.txt").write_text("todo\n")
    return committed_repo


def _invoke(repo, *args):
    return runner.invoke(app, ["--repo", str(repo), "--silent", *args])


def test_status(dirty_repo):
    result = _invoke(dirty_repo, "status")
    assert result.exit_code == 0, result.output
    assert "app.py" in result.output
    assert "notes.txt" in result.output
    assert "Modified (1)" in result.output


def test_clean_status(committed_repo):
    result = _invoke(committed_repo, "status")
    assert result.exit_code == 0
    assert "nothing to stage or commit" in result.output


def test_diff_and_hunks(dirty_repo):
    diff = _invoke(dirty_repo, "diff", "app.py")
    assert diff.exit_code == 0, diff.output
    assert "line 25 changed" in diff.output

    hunks = _invoke(dirty_repo, "hunks", "app.py")
    assert hunks.exit_code == 0
    assert hunks.output.count("@@") == 4


def test_stage_hunk_then_commit(dirty_repo, git):
    result = _invoke(dirty_repo, "stage-hunk", "app.py", "0")
    assert result.exit_code == 0, result.output
    assert "+line 2 changed" in git("diff", "--cached")

    result = _invoke(dirty_repo, "commit", "-m", "First hunk")
    assert result.exit_code == 0, result.output
    assert git("log", "-1", "--format=%s").strip() == "First hunk"
    assert "+line 25 changed" in git("diff")


def test_stage_and_unstage_files(dirty_repo, git):
    assert _invoke(dirty_repo, "stage", "app.py", "notes.txt").exit_code == 0
    assert git("diff", "--cached", "--name-only").split() == ["app.py", "notes.txt"]

    assert _invoke(dirty_repo, "unstage", "notes.txt").exit_code == 0
    assert git("diff", "--cached", "--name-only").split() == ["app.py"]


def test_stage_unknown_path_fails(dirty_repo, git):
    result = _invoke(dirty_repo, "stage", "app.py", "missing.py")
    assert result.exit_code == 1
    # nothing was staged
    assert git("diff", "--cached") == ""


def test_commit_with_nothing_staged_fails(dirty_repo):
    assert _invoke(dirty_repo, "commit", "-m", "Nothing").exit_code == 1


def test_log(committed_repo):
    result = _invoke(committed_repo, "log", "-n", "5")
    assert result.exit_code == 0, result.output
    assert "Initial commit" in result.output


def test_not_a_repository(tmp_path):
    result = _invoke(tmp_path, "status")
    assert result.exit_code == 1


def test_ctl_without_server(tmp_path):
    result = runner.invoke(app, ["ctl", "ping", "--socket", str(tmp_path / "none.sock")])
    assert result.exit_code == 1
