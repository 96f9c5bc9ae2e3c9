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

import typer
from loguru import logger

from gitstage.commands.status import load_manager
from gitstage.context import GlobalContext
from gitstage.core.data.status import FileEntry
from gitstage.core.diff.hunk_patcher import extract_hunk_patch
from gitstage.core.exceptions import (
    GitError,
    ValidationError,
    handle_gitstage_exception,
    path_not_found,
)
from gitstage.core.state.git_state_manager import GitStateManager


def find_entry(manager: GitStateManager, path: str, staged: bool) -> FileEntry:
    for entry in manager.state.status.files:
        if entry.path == path and entry.staged == staged:
            return entry
    raise path_not_found(path)


def _raise_on_failure(manager: GitStateManager, ok: bool) -> None:
    if not ok:
        raise GitError(manager.state.error or "Operation failed")


async def run_stage(global_context: GlobalContext, paths: list[str], staged: bool) -> None:
    """Stage (or with staged=True unstage) whole files. No paths means every file."""
    manager = await load_manager(global_context)
    try:
        if not paths:
            ok = await (manager.unstage_all() if staged else manager.stage_all())
            _raise_on_failure(manager, ok)
            return

        # look everything up first so a typo changes nothing
        entries = [find_entry(manager, path, staged) for path in paths]
        for entry in entries:
            ok = await (manager.unstage(entry) if staged else manager.stage(entry))
            _raise_on_failure(manager, ok)
            logger.info(f"{'Unstaged' if staged else 'Staged'} {entry.path}")
    finally:
        manager.dispose()


async def run_hunk(
    global_context: GlobalContext, path: str, hunk_index: int, staged: bool
) -> None:
    """Move one hunk of `path` into (or with staged=True out of) the index."""
    manager = await load_manager(global_context)
    try:
        entry = find_entry(manager, path, staged)
        if entry.is_untracked:
            # an untracked file is a single hunk
            if hunk_index != 0:
                raise ValidationError(f"{path} is untracked and has only hunk 0")
            _raise_on_failure(manager, await manager.stage(entry))
            return

        await manager.select_file(entry)
        diff = manager.state.diff
        if diff is None:
            raise GitError(manager.state.error or f"No diff for {path}")

        patch = extract_hunk_patch(diff.raw, hunk_index)
        if patch is None:
            raise ValidationError(
                f"No hunk {hunk_index} in {path}",
                f"{path} has {diff.hunk_count} hunks",
            )

        ok = await (manager.unstage_hunk(patch) if staged else manager.stage_hunk(patch))
        _raise_on_failure(manager, ok)
        logger.info(f"{'Unstaged' if staged else 'Staged'} hunk {hunk_index} of {path}")
    finally:
        manager.dispose()


def main(
    ctx: typer.Context,
    paths: list[str] | None = typer.Argument(
        None, help="Files to stage. Stages everything when omitted."
    ),
) -> None:
    """
    Stage whole files.

    Examples:
        gitstage stage src/app.py README.md
        gitstage stage
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_stage(global_context, paths or [], staged=False))


def unstage(
    ctx: typer.Context,
    paths: list[str] | None = typer.Argument(
        None, help="Files to unstage. Unstages everything when omitted."
    ),
) -> None:
    """
    Remove whole files from the index, keeping the working tree as is.

    Examples:
        gitstage unstage src/app.py
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_stage(global_context, paths or [], staged=True))


def stage_hunk(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File containing the hunk"),
    index: int = typer.Argument(..., min=0, help="Hunk index, as listed by `gitstage hunks`"),
) -> None:
    """
    Stage a single hunk.

    Examples:
        gitstage hunks src/app.py
        gitstage stage-hunk src/app.py 1
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_hunk(global_context, path, index, staged=False))


def unstage_hunk(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File containing the hunk"),
    index: int = typer.Argument(
        ..., min=0, help="Hunk index, as listed by `gitstage hunks --staged`"
    ),
) -> None:
    """
    Unstage a single hunk.

    Examples:
        gitstage unstage-hunk src/app.py 0
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_hunk(global_context, path, index, staged=True))
