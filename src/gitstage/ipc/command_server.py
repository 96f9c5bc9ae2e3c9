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
import json
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

from loguru import logger

from gitstage.core.exceptions import GitStageError, IPCError
from gitstage.ipc.commands import Command, PingCommand, failure, parse_command, success

CommandHandler = Callable[[Command], Awaitable[dict]]


class CommandServer:
    """
    Line-delimited JSON over a unix socket.

    `ping` is answered by the server itself so clients can poll for
    readiness before a handler is registered; everything else goes to the
    handler, one request at a time per connection.
    """

    def __init__(self, socket_path: str | Path) -> None:
        self.socket_path = Path(socket_path)
        self.handler: CommandHandler | None = None
        self.ready = False
        self._server: asyncio.AbstractServer | None = None

    def set_handler(self, handler: CommandHandler) -> None:
        self.handler = handler

    def notify_ready(self) -> None:
        self.ready = True
        logger.debug("Command server ready")

    async def start(self) -> None:
        self.socket_path.parent.mkdir(parents=True, exist_ok=True)
        self._remove_stale_socket()
        self._server = await asyncio.start_unix_server(
            self._handle_connection, path=str(self.socket_path)
        )
        os.chmod(self.socket_path, 0o600)
        logger.info(f"Listening on {self.socket_path}")

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        self._remove_stale_socket()
        self.ready = False

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        await self._server.serve_forever()

    def _remove_stale_socket(self) -> None:
        try:
            self.socket_path.unlink()
        except FileNotFoundError:
            pass

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            while line := await reader.readline():
                if not line.strip():
                    continue
                response = await self.process_command(line)
                writer.write((json.dumps(response) + "\n").encode("utf-8"))
                await writer.drain()
        except ConnectionError as e:
            logger.debug(f"Client went away: {e}")
        finally:
            writer.close()

    async def process_command(self, line: str | bytes) -> dict:
        try:
            command = parse_command(line)
        except IPCError as e:
            logger.debug(f"Rejected command: {e.details}")
            return failure(e.message)

        if isinstance(command, PingCommand):
            return success(ready=self.ready)

        if self.handler is None:
            return failure("No handler registered")

        logger.debug(f"IPC command: {command.action}")
        try:
            return await self.handler(command)
        except GitStageError as e:
            logger.error(f"Command {command.action} failed: {e.message}")
            return failure(e.message)
