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

"""
Logging setup for gitstage.

Console output goes through rich, the full DEBUG trail goes to a rotating
file under the platform log directory.
"""

from datetime import datetime
from pathlib import Path

from loguru import logger
from rich.console import Console

from gitstage.constants import APP_NAME, LOG_DIR

_FILE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def _console_sink(console: Console):
    def sink(message):
        record = message.record
        text = record["message"].rstrip("\n")
        if record["level"].no >= 40:
            console.print(f"[bold red]{text}[/bold red]", highlight=False)
        elif record["level"].no >= 30:
            console.print(f"[yellow]{text}[/yellow]", highlight=False)
        else:
            console.print(text, highlight=False)

    return sink


def setup_logger(
    command_name: str | None,
    debug: bool = False,
    silent: bool = False,
    console: Console | None = None,
    log_dir: Path = LOG_DIR,
) -> Path:
    """
    Configure loguru for a command run.

    Args:
        command_name: Name of the command being executed
        debug: Show DEBUG messages on the console
        silent: No console output at all, the file sink still records everything
        console: Rich console to print to (stderr by default)
        log_dir: Directory for the log file

    Returns:
        Path to the log file
    """
    logger.remove()

    if not silent:
        sink_console = console if console is not None else Console(stderr=True)
        logger.add(
            _console_sink(sink_console),
            level="DEBUG" if debug else "INFO",
            format="{message}",
            catch=True,
        )

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    logfile = log_dir / f"{APP_NAME}_{timestamp}.log"

    logger.add(
        logfile,
        level="DEBUG",
        format=_FILE_FORMAT,
        rotation="10 MB",
        retention="14 days",
        compression="gz",
        catch=True,
        backtrace=True,
        diagnose=False,
    )

    logger.bind(command=command_name, logfile=str(logfile)).debug("Logger initialized")
    logger.debug(f"Log file created at: {logfile}")

    return logfile
