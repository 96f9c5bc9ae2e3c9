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
from pathlib import Path

from loguru import logger

from gitstage.core.exceptions import IPCError


class CommandClient:
    """Talks to a running `gitstage serve` over its control socket."""

    def __init__(self, socket_path: str | Path, timeout: float = 10.0) -> None:
        self.socket_path = Path(socket_path)
        self.timeout = timeout

    async def send(self, command: dict) -> dict:
        """Send one command and return the decoded response line."""
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_unix_connection(str(self.socket_path)), self.timeout
            )
        except (OSError, TimeoutError) as e:
            raise IPCError(
                f"Cannot connect to {self.socket_path}",
                "Is `gitstage serve` running with this socket path?",
            ) from e

        try:
            writer.write((json.dumps(command) + "\n").encode("utf-8"))
            await writer.drain()
            line = await asyncio.wait_for(reader.readline(), self.timeout)
        except TimeoutError as e:
            raise IPCError(f"No response to {command.get('action')} within {self.timeout}s") from e
        finally:
            writer.close()

        if not line:
            raise IPCError("Connection closed without a response")
        try:
            return json.loads(line)
        except json.JSONDecodeError as e:
            raise IPCError("Malformed response", line.decode("utf-8", errors="replace")) from e

    async def wait_for_ready(self, max_wait: float = 5.0, poll_interval: float = 0.1) -> None:
        """Poll with `ping` until the server reports ready."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_wait
        last_error: IPCError | None = None
        attempts = 0

        while loop.time() < deadline:
            attempts += 1
            try:
                response = await self.send({"action": "ping"})
                if response.get("ready"):
                    return
            except IPCError as e:
                last_error = e
            await asyncio.sleep(poll_interval)

        logger.debug(f"Server not ready after {attempts} attempts")
        raise IPCError(
            f"Socket not ready after {max_wait}s ({attempts} attempts)",
            last_error.message if last_error else None,
        )
