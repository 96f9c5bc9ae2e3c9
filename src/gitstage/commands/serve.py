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
import signal
from pathlib import Path

import typer
from loguru import logger

from gitstage.constants import DEFAULT_SOCKET_PATH
from gitstage.context import GlobalContext
from gitstage.core.exceptions import handle_gitstage_exception
from gitstage.ipc.command_server import CommandServer
from gitstage.session import StagingSession


async def run_serve(global_context: GlobalContext) -> None:
    config = global_context.config
    socket_path = config.socket_path or DEFAULT_SOCKET_PATH

    session = StagingSession(global_context.repo_path, config)
    server = CommandServer(socket_path)
    server.set_handler(session.handle_command)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, session.stopped.set)

    await server.start()
    try:
        await session.start()
        server.notify_ready()
        logger.info(f"Serving {session.repo_path} on {socket_path}")
        await session.stopped.wait()
    finally:
        await server.stop()
        await session.close()
        logger.info("Stopped")


def main(
    ctx: typer.Context,
    socket: Path | None = typer.Option(
        None, "--socket", help="Socket path (overrides the socket_path config value)"
    ),
    follow: Path | None = typer.Option(
        None,
        "--follow",
        help="Follow the repository named by the last line of this file (overrides follow_file)",
    ),
) -> None:
    """
    Keep a staging session open and accept commands on a unix socket.

    Every request is one JSON object per line with an "action" field, for
    example {"action": "toggle", "index": 2}. Use `gitstage ctl` to send
    commands from the shell.

    Examples:
        gitstage serve
        gitstage serve --socket /tmp/gitstage.sock --follow ~/.cache/editor-file
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        overrides = {}
        if socket is not None:
            overrides["socket_path"] = socket
        if follow is not None:
            overrides["follow_file"] = follow
        if overrides:
            global_context = GlobalContext.from_global_config(
                global_context.config.model_copy(update=overrides),
                global_context.repo_path,
            )
        asyncio.run(run_serve(global_context))
