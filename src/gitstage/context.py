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

from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import BaseModel, Field

from gitstage.constants import (
    DEFAULT_CHECK_IGNORE_BATCH_SIZE,
    DEFAULT_HISTORY_COUNT,
    DEFAULT_WATCH_INTERVAL,
    DEFAULT_WORD_DIFF_THRESHOLD,
)
from gitstage.core.git_commands.git_commands import GitCommands
from gitstage.core.git_interface.interface import GitInterface
from gitstage.core.git_interface.SubprocessGitInterface import (
    SubprocessGitInterface,
)

# fields that only make sense as config values, not global CLI flags
_CONFIG_ONLY_FIELDS = frozenset({"follow_file", "socket_path"})


class GitStageConfig(BaseModel):
    word_diff_threshold: float = Field(
        DEFAULT_WORD_DIFF_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Minimum similarity (0.0-1.0) for a deletion/addition pair to get word-level highlighting",
    )
    history_count: int = Field(
        DEFAULT_HISTORY_COUNT, ge=1, description="Number of commits loaded into history"
    )
    check_ignore_batch_size: int = Field(
        DEFAULT_CHECK_IGNORE_BATCH_SIZE,
        ge=1,
        description="Paths passed to each git check-ignore call",
    )
    watch: bool = Field(True, description="Refresh automatically when the repository changes")
    watch_interval: float = Field(
        DEFAULT_WATCH_INTERVAL, gt=0.0, description="Seconds between repository polls"
    )
    follow_file: Path | None = Field(
        None, description="File whose last line names the repository to follow"
    )
    socket_path: Path | None = Field(
        None, description="Unix socket the serve command listens on"
    )
    verbose: bool = Field(False, description="Enable verbose logging output")
    silent: bool = Field(
        False, description="Do not output any log text to the console"
    )

    @classmethod
    def get_cli_params(cls) -> dict[str, tuple[type, typer.models.OptionInfo]]:
        """Typer options for every config field, all defaulting to None so unset flags fall through to lower-priority sources."""
        params = {}
        for name, info in cls.model_fields.items():
            if name in _CONFIG_ONLY_FIELDS:
                continue
            flag = "--" + name.replace("_", "-")
            params[name] = (
                info.annotation | None,
                typer.Option(None, flag, help=info.description),
            )
        return params


@dataclass(frozen=True)
class GlobalContext:
    repo_path: Path
    git_interface: GitInterface
    git_commands: GitCommands
    config: GitStageConfig

    @classmethod
    def from_global_config(cls, config: GitStageConfig, repo_path: Path):
        repo_path = Path(repo_path).expanduser().resolve()
        git_interface = SubprocessGitInterface(repo_path)
        git_commands = GitCommands(git_interface)

        return GlobalContext(repo_path, git_interface, git_commands, config)
