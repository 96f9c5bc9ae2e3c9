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

from pathlib import Path

from platformdirs import user_config_dir, user_log_path, user_runtime_dir

APP_NAME = "gitstage"
ENV_APP_PREFIX = APP_NAME.upper() + "_"
LOG_DIR = Path(user_log_path(appname=APP_NAME))

CONFIG_FILENAME = "gitstageconfig.toml"

GLOBAL_CONFIG_FILE = Path(user_config_dir(APP_NAME)) / CONFIG_FILENAME
LOCAL_CONFIG_FILE = Path(CONFIG_FILENAME)

DEFAULT_SOCKET_PATH = Path(user_runtime_dir(APP_NAME)) / "control.sock"

# git check-ignore is given this many paths per call to stay under exec argv limits
DEFAULT_CHECK_IGNORE_BATCH_SIZE = 100

DEFAULT_HISTORY_COUNT = 100

DEFAULT_WORD_DIFF_THRESHOLD = 0.30

DEFAULT_WATCH_INTERVAL = 0.5

NOT_A_REPOSITORY = "Not a git repository"
