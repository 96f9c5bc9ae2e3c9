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

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from gitstage.core.exceptions import ConfigurationError


@dataclass
class LoadedConfig:
    config: BaseModel
    used_sources: list[str] = field(default_factory=list)
    used_defaults: bool = False


class ConfigLoader:
    """Loads configuration from several sources and merges them into one model, highest priority first."""

    @staticmethod
    def get_full_config(
        config_model: type[BaseModel],
        input_args: dict,
        local_config_path: Path,
        env_app_prefix: str,
        global_config_path: Path,
        custom_config_path: Path | None = None,
    ) -> LoadedConfig:
        """
        Priority: input args, custom config, local config, environment
        variables, global config. Keys unknown to the model are ignored.
        """
        sources: list[tuple[str, dict]] = [("Input Args", input_args)]

        if custom_config_path is not None:
            if not custom_config_path.exists():
                raise ConfigurationError(
                    f"Custom config file not found: {custom_config_path}"
                )
            sources.append(("Custom Config", ConfigLoader.load_toml(custom_config_path)))

        sources += [
            ("Local Config", ConfigLoader.load_toml(local_config_path)),
            ("Environment Variables", ConfigLoader.load_env(env_app_prefix)),
            ("Global Config", ConfigLoader.load_toml(global_config_path)),
        ]

        for name, values in sources:
            logger.debug(f"config source {name}: {values}")

        return ConfigLoader.build(config_model, sources)

    @staticmethod
    def load_toml(path: Path) -> dict:
        """Reads a TOML file. A missing or broken file contributes nothing."""
        if not path.exists():
            logger.debug(f"{path} does not exist")
            return {}

        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.warning(f"Failed to load {path}: {e}")
            return {}

    @staticmethod
    def load_env(app_prefix: str) -> dict:
        """GITSTAGE_WATCH_INTERVAL=1 becomes {"watch_interval": "1"}; pydantic coerces the strings."""
        prefix = app_prefix.lower()
        return {
            key[len(app_prefix) :].lower(): value
            for key, value in os.environ.items()
            if key.lower().startswith(prefix)
        }

    @staticmethod
    def build(
        config_model: type[BaseModel], sources: list[tuple[str, dict]]
    ) -> LoadedConfig:
        remaining = set(config_model.model_fields)
        merged: dict = {}
        used: list[str] = []

        for name, values in sources:
            if not remaining:
                break
            found = values.keys() & remaining
            if not found:
                continue
            used.append(name)
            for key in found:
                merged[key] = values[key]
            remaining -= found

        try:
            config = config_model.model_validate(merged)
        except PydanticValidationError as e:
            raise ConfigurationError("Invalid configuration", str(e)) from e

        return LoadedConfig(config, used, bool(remaining))
