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
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

from gitstage.constants import DEFAULT_WATCH_INTERVAL


@dataclass(frozen=True)
class FollowState:
    enabled: bool = False
    source_file: Path | None = None
    raw_content: str | None = None
    path: Path | None = None
    last_update: datetime | None = None


def last_nonempty_line(text: str) -> str | None:
    for line in reversed(text.splitlines()):
        if line.strip():
            return line.strip()
    return None


def expand_path(content: str) -> Path:
    expanded = Path(os.path.expandvars(content)).expanduser()
    return expanded if expanded.is_absolute() else expanded.resolve()


class FollowMode:
    """
    Follows a target file naming the repository (or a file inside it) to show.

    The file may be append-only; only its last non-empty line counts. When
    the named path differs from the current repository `on_repo_change`
    fires, and `on_file_navigate` fires with the raw line on every new
    value.
    """

    def __init__(
        self,
        target_file: Path,
        get_current_repo: Callable[[], Path | None],
        on_repo_change: Callable[[Path, FollowState], object],
        on_file_navigate: Callable[[str], object] | None = None,
        interval: float = DEFAULT_WATCH_INTERVAL,
    ) -> None:
        self.target_file = Path(target_file).expanduser()
        self.get_current_repo = get_current_repo
        self.on_repo_change = on_repo_change
        self.on_file_navigate = on_file_navigate
        self.interval = interval
        self.state = FollowState()
        self._last_content: str | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_enabled(self) -> bool:
        return self._task is not None

    async def start(self) -> None:
        if self._task is not None:
            return
        self.state = FollowState(enabled=True, source_file=self.target_file)
        self.target_file.parent.mkdir(parents=True, exist_ok=True)
        await self.check()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.state = FollowState()
        self._last_content = None

    async def toggle(self) -> None:
        if self.is_enabled:
            self.stop()
        else:
            await self.start()

    def read_target(self) -> str | None:
        try:
            text = self.target_file.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None
        return last_nonempty_line(text)

    async def check(self) -> bool:
        """Read the target once. Returns True when it named a new path."""
        content = await asyncio.to_thread(self.read_target)
        if not content or content == self._last_content:
            return False

        self._last_content = content
        path = expand_path(content)
        self.state = FollowState(
            enabled=True,
            source_file=self.target_file,
            raw_content=content,
            path=path,
            last_update=datetime.now(),
        )
        logger.debug(f"Follow target now names {path}")

        if path != self.get_current_repo():
            self.on_repo_change(path, self.state)
        if self.on_file_navigate is not None:
            self.on_file_navigate(content)
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.check()
            except OSError as e:
                logger.warning(f"Failed to read {self.target_file}: {e}")
