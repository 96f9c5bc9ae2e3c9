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
from rich.console import Console

from gitstage.context import GlobalContext
from gitstage.core.exceptions import GitError, handle_gitstage_exception
from gitstage.core.state.git_state_manager import GitStateManager
from gitstage.core.ui.render import status_table


async def load_manager(global_context: GlobalContext) -> GitStateManager:
    """A refreshed manager for the context's repository. Raises GitError when the refresh failed."""
    manager = GitStateManager(
        global_context.repo_path, global_context.config, global_context.git_commands
    )
    await manager.refresh()
    if manager.state.error:
        raise GitError(manager.state.error)
    return manager


async def run_status(global_context: GlobalContext, console: Console) -> int:
    manager = await load_manager(global_context)
    try:
        status = manager.state.status
        if not status.files:
            console.print(f"On branch {status.branch.current}, nothing to stage or commit")
            return 0
        console.print(status_table(status, manager.hunk_counts))
        logger.debug(f"{len(status.files)} entries, {manager.staged_count} staged")
        return len(status.files)
    finally:
        manager.dispose()


def main(ctx: typer.Context) -> None:
    """
    Show the file list grouped into modified, untracked and staged sections.

    Indices in the first column are the ones `ctl toggle --index` and
    `ctl select` accept.

    Examples:
        gitstage status
        gitstage --repo ../other status
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_status(global_context, Console()))
