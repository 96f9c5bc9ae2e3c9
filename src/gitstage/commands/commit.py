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
from gitstage.core.exceptions import GitError, handle_gitstage_exception


async def run_commit(global_context: GlobalContext, message: str | None, amend: bool) -> None:
    manager = await load_manager(global_context)
    try:
        if message is None and amend:
            message = await manager.history.get_head_commit_message()
        if not await manager.commit(message or "", amend):
            raise GitError(manager.state.error or "Commit failed")
        logger.info("Amended last commit" if amend else "Committed staged changes")
    finally:
        manager.dispose()


def main(
    ctx: typer.Context,
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message"),
    amend: bool = typer.Option(
        False, "--amend", help="Replace the last commit. Keeps its message when -m is omitted."
    ),
) -> None:
    """
    Commit what is staged.

    Examples:
        gitstage commit -m "Fix parser"
        gitstage commit --amend
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(run_commit(global_context, message, amend))
