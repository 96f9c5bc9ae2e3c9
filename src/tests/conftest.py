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

import subprocess
from pathlib import Path

import pytest


def _run_git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path):
    """A fresh repository on branch main with a local identity, no commits yet."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _run_git(repo, "init", "-q")
    _run_git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    _run_git(repo, "config", "user.name", "Test User")
    _run_git(repo, "config", "user.email", "test@example.com")
    _run_git(repo, "config", "commit.gpgsign", "false")
    _run_git(repo, "config", "core.autocrlf", "false")
    return repo


@pytest.fixture
def git(git_repo):
    """Run git in `git_repo` and return stdout."""

    def run(*args: str) -> str:
        return _run_git(git_repo, *args)

    return run


@pytest.fixture
def committed_repo(git_repo, git):
    """`git_repo` with one commit containing app.py (30 numbered lines)."""
    content = "".join(f"line {i}\n" for i in range(1, 31))
    (git_repo / "app.py").write_text(content)
    git("add", "app.py")
    git("commit", "-q", "-m", "Initial commit")
    return git_repo
