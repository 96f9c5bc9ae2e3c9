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

from gitstage.context import GlobalContext
from gitstage.core.diff.word_diff import WordDiffEngine
from gitstage.core.exceptions import GitError, handle_gitstage_exception
from gitstage.core.state.git_state_manager import GitStateManager
from gitstage.core.ui.render import diff_text, log_table


async def run_log(
    global_context: GlobalContext, console: Console, count: int | None, show: str | None
) -> None:
    manager = GitStateManager(
        global_context.repo_path, global_context.config, global_context.git_commands
    )
    history = manager.history
    try:
        await history.load_history(count)
        if history.state.error:
            raise GitError(history.state.error)

        if show is None:
            console.print(log_table(history.state.commits))
            return

        commit = next(
            (c for c in history.state.commits if c.hash.startswith(show)), None
        )
        if commit is None:
            raise GitError(
                f"Commit {show} is not among the last {len(history.state.commits)} commits"
            )
        await history.select_commit(commit)
        if history.state.error:
            raise GitError(history.state.error)
        engine = WordDiffEngine(global_context.config.word_diff_threshold)
        console.print(log_table([commit]))
        console.print(diff_text(history.state.commit_diff, engine, line_numbers=False), end="")
    finally:
        manager.dispose()


def main(
    ctx: typer.Context,
    count: int | None = typer.Option(
        None, "-n", "--count", min=1, help="Number of commits (defaults to history_count)"
    ),
    show: str | None = typer.Option(
        None, "--show", help="Show the diff of the commit with this hash prefix"
    ),
) -> None:
    """
    Show recent commits, or one commit's diff.

    Examples:
        gitstage log -n 20
        gitstage log --show 3f2a1c
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_log(global_context, Console(), count, show))
