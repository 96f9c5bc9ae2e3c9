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
from rich.console import Console
from rich.text import Text

from gitstage.commands.status import load_manager
from gitstage.context import GlobalContext
from gitstage.core.data.diff import DiffLineKind, DiffResult
from gitstage.core.diff.hunk_patcher import hunk_boundaries
from gitstage.core.diff.word_diff import WordDiffEngine
from gitstage.core.exceptions import (
    GitError,
    handle_gitstage_exception,
    path_not_found,
)
from gitstage.core.ui.render import diff_text


async def load_diff(global_context: GlobalContext, path: str | None, staged: bool) -> DiffResult:
    """
    The diff shown for one file, or for the whole side when no path is given.

    Untracked files diff against nothing, like in the file list.
    """
    manager = await load_manager(global_context)
    try:
        if path is None:
            return await manager.working_tree.full_diff(staged)

        entry = next(
            (
                f
                for f in manager.state.status.files
                if f.path == path and f.staged == staged
            ),
            None,
        )
        if entry is None:
            raise path_not_found(path)
        await manager.select_file(entry)
        if manager.state.error:
            raise GitError(manager.state.error)
        return manager.state.diff or DiffResult.empty()
    finally:
        manager.dispose()


async def run_diff(
    global_context: GlobalContext, console: Console, path: str | None, staged: bool
) -> None:
    diff = await load_diff(global_context, path, staged)
    if diff.is_empty:
        console.print("No changes")
        return
    engine = WordDiffEngine(global_context.config.word_diff_threshold)
    console.print(diff_text(diff, engine), end="")


async def run_hunks(
    global_context: GlobalContext, console: Console, path: str, staged: bool
) -> None:
    diff = await load_diff(global_context, path, staged)
    lines = diff.lines
    for boundary in hunk_boundaries(lines):
        body = lines[boundary.header_index + 1 : boundary.end]
        added = sum(1 for line in body if line.kind == DiffLineKind.ADDITION)
        removed = sum(1 for line in body if line.kind == DiffLineKind.DELETION)
        row = Text(f"{boundary.hunk_index:>3}  ", style="bold")
        row.append(lines[boundary.header_index].text, style="cyan")
        row.append(f"  +{added}", style="green")
        row.append(f" -{removed}", style="red")
        console.print(row)


def main(
    ctx: typer.Context,
    path: str | None = typer.Argument(
        None, help="File to diff, relative to the repository root"
    ),
    staged: bool = typer.Option(
        False, "--staged", help="Show the staged side instead of the working tree"
    ),
) -> None:
    """
    Show a diff with word-level highlighting of modified lines.

    Examples:
        gitstage diff
        gitstage diff src/app.py
        gitstage diff src/app.py --staged
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_diff(global_context, Console(), path, staged))


def hunks(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File whose hunks to list"),
    staged: bool = typer.Option(False, "--staged", help="List staged hunks"),
) -> None:
    """
    List the hunks of one file with their indices, for stage-hunk and unstage-hunk.

    Examples:
        gitstage hunks src/app.py
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_hunks(global_context, Console(), path, staged))
