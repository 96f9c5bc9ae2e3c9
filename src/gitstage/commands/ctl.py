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
from pathlib import Path

import typer
from rich.console import Console

from gitstage.constants import DEFAULT_SOCKET_PATH
from gitstage.core.exceptions import IPCError, handle_gitstage_exception
from gitstage.ipc.command_client import CommandClient
from gitstage.ipc.commands import ACTIONS


def build_request(
    action: str,
    message: str | None = None,
    index: int | None = None,
    hunk_index: int | None = None,
    amend: bool = False,
) -> dict:
    request: dict = {"action": action}
    if message is not None:
        request["message"] = message
    if index is not None:
        request["index"] = index
    if hunk_index is not None:
        request["hunkIndex"] = hunk_index
    if amend:
        request["amend"] = True
    return request


async def run_ctl(socket_path: Path, request: dict, wait: float, timeout: float) -> dict:
    client = CommandClient(socket_path, timeout=timeout)
    if wait > 0:
        await client.wait_for_ready(max_wait=wait)
    return await client.send(request)


def main(
    action: str = typer.Argument(..., help=f"One of: {', '.join(ACTIONS)}"),
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message"),
    index: int | None = typer.Option(None, "--index", "-i", min=0, help="File index"),
    hunk_index: int | None = typer.Option(None, "--hunk-index", min=0, help="Hunk index"),
    amend: bool = typer.Option(False, "--amend", help="Amend when committing"),
    socket: Path = typer.Option(DEFAULT_SOCKET_PATH, "--socket", help="Socket of the running server"),
    wait: float = typer.Option(0.0, "--wait", min=0.0, help="Seconds to wait for the server to become ready"),
    timeout: float = typer.Option(10.0, "--timeout", min=0.1, help="Seconds to wait for a response"),
) -> None:
    """
    Send one command to a running `gitstage serve` and print the JSON response.

    Examples:
        gitstage ctl getState
        gitstage ctl toggle --index 3
        gitstage ctl commit -m "Fix parser"
    """
    with handle_gitstage_exception():
        request = build_request(action, message, index, hunk_index, amend)
        response = asyncio.run(run_ctl(socket, request, wait, timeout))
        Console().print_json(data=response)
        if not response.get("success"):
            raise IPCError(response.get("error") or f"{action} failed")
