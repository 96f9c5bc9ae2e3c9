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
import inspect
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from loguru import logger

from gitstage.commands import commit, compare, ctl, diff, log, serve, stage, status
from gitstage.constants import (
    APP_NAME,
    ENV_APP_PREFIX,
    GLOBAL_CONFIG_FILE,
    LOCAL_CONFIG_FILE,
)
from gitstage.context import GitStageConfig, GlobalContext
from gitstage.core.config.config_loader import ConfigLoader
from gitstage.core.exceptions import handle_gitstage_exception, not_git_repository
from gitstage.core.logging.logging import setup_logger
from gitstage.runtimeutil import (
    ensure_utf8_output,
    get_log_dir_callback,
    version_callback,
)

app = typer.Typer(
    help=f"{APP_NAME}: stage files and hunks, inspect diffs and history",
    pretty_exceptions_show_locals=False,
    pretty_exceptions_enable=False,
    add_completion=False,
)

app.command(name="status")(status.main)
app.command(name="diff")(diff.main)
app.command(name="hunks")(diff.hunks)
app.command(name="stage")(stage.main)
app.command(name="unstage")(stage.unstage)
app.command(name="stage-hunk")(stage.stage_hunk)
app.command(name="unstage-hunk")(stage.unstage_hunk)
app.command(name="commit")(commit.main)
app.command(name="log")(log.main)
app.command(name="compare")(compare.main)
app.command(name="serve")(serve.main)
app.command(name="ctl")(ctl.main)

# ctl only talks to a socket, it needs neither a repository nor a config
no_context_commands = {"ctl"}


def load_global_config(custom_config_path: str | None, **input_args):
    # input args are the "runtime overrides" for configs
    config_args = {key: item for key, item in input_args.items() if item is not None}

    return ConfigLoader.get_full_config(
        GitStageConfig,
        config_args,
        LOCAL_CONFIG_FILE,
        ENV_APP_PREFIX,
        GLOBAL_CONFIG_FILE,
        custom_config_path=Path(custom_config_path)
        if custom_config_path is not None
        else None,
    )


def create_global_callback():
    """
    Build the main callback with one option per GitStageConfig field, so
    the command line stays in sync with the config model.
    """
    cli_params = GitStageConfig.get_cli_params()

    def callback(
        ctx: typer.Context,
        version: bool = typer.Option(
            False,
            "--version",
            "-V",
            callback=version_callback,
            help="Show version and exit",
        ),
        log_path: bool = typer.Option(
            False,
            "--log-dir",
            "-LD",
            callback=get_log_dir_callback,
            help="Show log path (where logs for gitstage live) and exit",
        ),
        repo_path: str = typer.Option(
            ".",
            "--repo",
            help="Path to the git repository to operate on.",
        ),
        custom_config: str | None = typer.Option(
            None,
            "--custom-config",
            help="Path to a custom config file",
        ),
        **kwargs,
    ) -> None:
        """
        Global setup callback. Initialize global context/config used by commands
        """
        with handle_gitstage_exception(exit_on_fail=True):
            if ctx.invoked_subcommand is None:
                print(ctx.get_help())
                raise typer.Exit()

            # skip --help in subcommands
            if any(arg in ctx.help_option_names for arg in sys.argv):
                return

            if ctx.invoked_subcommand in no_context_commands:
                setup_logger(ctx.invoked_subcommand)
                return

            loaded = load_global_config(custom_config, **kwargs)
            config = loaded.config

            setup_logger(
                ctx.invoked_subcommand, debug=config.verbose, silent=config.silent
            )
            logger.debug(f"Used {loaded.used_sources} to build global context.")

            global_context = GlobalContext.from_global_config(config, Path(repo_path))
            # fail immediately if we arent in a valid git repo as we expect one
            if not asyncio.run(global_context.git_commands.is_repo()):
                raise not_git_repository(str(global_context.repo_path))

            ctx.obj = global_context

    sig = inspect.signature(callback)
    params = [p for p in sig.parameters.values() if p.name != "kwargs"]
    for param_name, (param_type, param_default) in cli_params.items():
        params.append(
            inspect.Parameter(
                param_name,
                inspect.Parameter.KEYWORD_ONLY,
                default=param_default,
                annotation=param_type,
            )
        )

    callback.__signature__ = sig.replace(parameters=params)
    return callback


main = create_global_callback()
app.callback(invoke_without_command=True)(main)


def run_app():
    """Run the application with global exception handling."""
    # force stdout to be utf8
    ensure_utf8_output()
    # load any .env files (config values possibly set through env)
    load_dotenv()
    app(prog_name=APP_NAME)


if __name__ == "__main__":
    run_app()
