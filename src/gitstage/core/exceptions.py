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

"""
Custom exception hierarchy for the gitstage application.

Errors raised by the git bridge carry a short user-facing message plus the
technical details (usually git's stderr). The state managers catch these at
their boundary and keep the message on their state; only the CLI lets them
surface, through handle_gitstage_exception.
"""

import contextlib
import sys

from loguru import logger


class GitStageError(Exception):
    """
    Base exception for all gitstage-related errors.

    All gitstage-specific exceptions should inherit from this class
    to enable consistent error handling throughout the application.
    """

    def __init__(self, message: str, details: str | None = None):
        """
        Initialize a GitStageError.

        Args:
            message: Main error message for the user
            details: Additional technical details for logging
        """
        self.message = message
        self.details = details
        super().__init__(message)


class GitError(GitStageError):
    """
    Errors related to git operations.

    Raised when git commands fail or when git repository
    state is invalid for the requested operation.
    """

    pass


class NotARepositoryError(GitError):
    """Raised when the target path is not inside a git working tree."""

    pass


class PatchApplyError(GitError):
    """Raised when `git apply` rejects a hunk patch."""

    pass


class NothingToCommitError(GitStageError):
    """Raised locally, before invoking git, when the index has nothing staged."""

    pass


class ValidationError(GitStageError):
    """
    Input validation errors.

    Raised when user input fails validation checks,
    such as unknown paths or hunk indices.
    """

    pass


class ConfigurationError(GitStageError):
    """
    Configuration-related errors.

    Raised when configuration files are invalid
    or contain incompatible settings.
    """

    pass


class IPCError(GitStageError):
    """Errors talking to a running gitstage session over its control socket."""

    pass


def git_not_found() -> GitError:
    """Create a GitError for when git is not available."""
    return GitError(
        "Git is not installed or not in PATH",
        "Please install git and ensure it's available in your PATH environment variable",
    )


def not_git_repository(path: str = ".") -> NotARepositoryError:
    """Create an error for when not in a git repository."""
    return NotARepositoryError(
        f"Not a git repository: {path}",
        "Run 'git init' to initialize a git repository or navigate to an existing repository",
    )


def nothing_to_commit() -> NothingToCommitError:
    return NothingToCommitError(
        "No staged changes to commit",
        "Stage files or hunks first, or pass --amend to rewrite the last commit",
    )


def path_not_found(path: str) -> ValidationError:
    """Create a ValidationError for paths missing from the file list."""
    return ValidationError(
        f"Path not found: {path}",
        "Please check that the path has changes in the working tree or index",
    )


@contextlib.contextmanager
def handle_gitstage_exception(exit_on_fail: bool = True):
    """Log GitStageErrors raised inside the block and optionally exit with status 1."""
    try:
        yield
    except GitStageError as e:
        logger.error(e.message)
        if e.details:
            logger.debug(e.details)
        if exit_on_fail:
            sys.exit(1)
        raise
