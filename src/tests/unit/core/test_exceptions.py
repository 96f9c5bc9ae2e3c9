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

from gitstage.core.exceptions import (
    GitError,
    GitStageError,
    NotARepositoryError,
    ValidationError,
    handle_gitstage_exception,
    not_git_repository,
    nothing_to_commit,
    path_not_found,
)


def test_hierarchy():
    assert issubclass(NotARepositoryError, GitError)
    assert issubclass(GitError, GitStageError)
    assert isinstance(path_not_found("x"), ValidationError)


def test_factories_carry_details():
    error = not_git_repository("/tmp/x")
    assert error.message == "Not a git repository: /tmp/x"
    assert error.details
    assert nothing_to_commit().message == "No staged changes to commit"
    assert path_not_found("a.py").message == "Path not found: a.py"


def test_handler_exits_with_status_one():
    with pytest.raises(SystemExit) as exc:
        with handle_gitstage_exception():
            raise GitError("boom", "stderr")
    assert exc.value.code == 1


def test_handler_can_reraise():
    with pytest.raises(GitError):
        with handle_gitstage_exception(exit_on_fail=False):
            raise GitError("boom")


def test_handler_leaves_other_exceptions_alone():
    with pytest.raises(KeyError):
        with handle_gitstage_exception():
            raise KeyError("x")
