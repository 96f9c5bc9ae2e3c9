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

import typer
from rich.console import Console
from rich.table import Table

from gitstage.context import GlobalContext
from gitstage.core.diff.word_diff import WordDiffEngine
from gitstage.core.exceptions import GitError, ValidationError, handle_gitstage_exception
from gitstage.core.state.git_state_manager import GitStateManager
from gitstage.core.ui.render import STATUS_LETTERS, diff_text, log_table


async def run_compare(
    global_context: GlobalContext,
    console: Console,
    base: str | None,
    include_uncommitted: bool,
    file_index: int | None,
) -> None:
    manager = GitStateManager(
        global_context.repo_path, global_context.config, global_context.git_commands
    )
    compare = manager.compare
    try:
        if base is not None:
            await compare.set_base_branch(base, include_uncommitted)
        else:
            await compare.refresh_compare_diff(include_uncommitted)
        if compare.state.error:
            raise GitError(compare.state.error)

        result = compare.state.compare_diff
        if file_index is not None:
            if not 0 <= file_index < len(result.files):
                raise ValidationError(
                    f"No file at index {file_index}",
                    f"{len(result.files)} files differ from {result.base_branch}",
                )
            compare.select_file(file_index)
            engine = WordDiffEngine(global_context.config.word_diff_threshold)
            console.print(diff_text(compare.state.selected_diff, engine), end="")
            return

        console.print(
            f"[bold]{result.base_branch}[/bold] ({result.merge_base[:7]}) .. "
            f"{'working tree' if include_uncommitted else 'HEAD'}: "
            f"{len(result.commits)} commits, {len(result.files)} files, "
            f"[green]+{result.total_additions}[/green] [red]-{result.total_deletions}[/red]"
        )
        if result.commits:
            console.print(log_table(result.commits))

        files = Table(show_header=True, header_style="bold")
        files.add_column("#", justify="right", style="grey50")
        files.add_column("", width=1)
        files.add_column("Path")
        files.add_column("+", justify="right", style="green")
        files.add_column("-", justify="right", style="red")
        for i, f in enumerate(result.files):
            files.add_row(str(i), STATUS_LETTERS[f.status], f.path, str(f.additions), str(f.deletions))
        console.print(files)
    finally:
        manager.dispose()


def main(
    ctx: typer.Context,
    base: str | None = typer.Option(
        None, "--base", "-b", help="Base branch. Defaults to origin/HEAD, main or master."
    ),
    include_uncommitted: bool = typer.Option(
        False, "--uncommitted", help="Compare the working tree instead of HEAD"
    ),
    file_index: int | None = typer.Option(
        None, "--file", "-f", min=0, help="Show the diff of the file at this index"
    ),
) -> None:
    """
    Summarize what the current branch changed since it left its base branch.

    Examples:
        gitstage compare
        gitstage compare --base develop --uncommitted
        gitstage compare --file 2
    """
    with handle_gitstage_exception():
        global_context: GlobalContext = ctx.obj
        asyncio.run(
            run_compare(global_context, Console(), base, include_uncommitted, file_index)
        )
