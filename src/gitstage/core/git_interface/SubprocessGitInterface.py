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
from pathlib import Path

from loguru import logger

from gitstage.core.exceptions import GitError, git_not_found

from .interface import GitBinaryResult, GitInterface, GitProcessResult

_LOG_TRUNCATE = 2000


def _truncate(text: str) -> str:
    return text[:_LOG_TRUNCATE] + ("...(truncated)" if len(text) > _LOG_TRUNCATE else "")


class SubprocessGitInterface(GitInterface):
    def __init__(self, repo_path: str | Path) -> None:
        # Ensure repo_path is a Path object for consistency
        if isinstance(repo_path, Path):
            self.repo_path = repo_path
        else:
            self.repo_path = Path(repo_path)

    async def _run(
        self,
        args: list[str],
        input_bytes: bytes | None,
        env: dict | None,
        cwd: str | Path | None,
    ) -> tuple[tuple[str, ...], int, bytes, bytes]:
        effective_cwd = str(cwd) if cwd is not None else str(self.repo_path)
        cmd = ["git", *args]
        logger.debug(f"Running git command: {' '.join(cmd)} cwd={effective_cwd}")

        process_env = None
        if env is not None:
            process_env = {**os.environ, **env}

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE if input_bytes is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=effective_cwd,
                env=process_env,
            )
        except FileNotFoundError as e:
            # either git itself or the working directory is missing
            if not Path(effective_cwd).is_dir():
                raise GitError(
                    f"Working directory does not exist: {effective_cwd}", str(e)
                ) from e
            raise git_not_found() from e

        stdout_bytes, stderr_bytes = await process.communicate(input_bytes)
        logger.debug(f"git returncode: {process.returncode}")
        return tuple(cmd), process.returncode, stdout_bytes, stderr_bytes

    async def run_git_text(
        self,
        args: list[str],
        input_text: str | None = None,
        env: dict | None = None,
        cwd: str | Path | None = None,
    ) -> GitProcessResult:
        stdin_bytes = input_text.encode("utf-8") if input_text is not None else None
        cmd, returncode, stdout_bytes, stderr_bytes = await self._run(
            args, stdin_bytes, env, cwd
        )

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        if stdout:
            logger.debug(f"git stdout: {_truncate(stdout)}")
        if stderr:
            logger.debug(f"git stderr: {_truncate(stderr)}")

        return GitProcessResult(args=cmd, returncode=returncode, stdout=stdout, stderr=stderr)

    async def run_git_text_out(
        self,
        args: list[str],
        input_text: str | None = None,
        env: dict | None = None,
        cwd: str | Path | None = None,
    ) -> str:
        result = await self.run_git_text(args, input_text=input_text, env=env, cwd=cwd)
        if not result.ok:
            _raise_failed(result.args, result.returncode, result.stderr)
        return result.stdout

    async def run_git_binary(
        self,
        args: list[str],
        input_bytes: bytes | None = None,
        env: dict | None = None,
        cwd: str | Path | None = None,
    ) -> GitBinaryResult:
        cmd, returncode, stdout_bytes, stderr_bytes = await self._run(
            args, input_bytes, env, cwd
        )

        if stdout_bytes:
            logger.debug(f"git stdout (binary length): {len(stdout_bytes)} bytes")
        if stderr_bytes:
            logger.debug(f"git stderr (binary): {_truncate(repr(stderr_bytes))}")

        return GitBinaryResult(
            args=cmd, returncode=returncode, stdout=stdout_bytes, stderr=stderr_bytes
        )

    async def run_git_binary_out(
        self,
        args: list[str],
        input_bytes: bytes | None = None,
        env: dict | None = None,
        cwd: str | Path | None = None,
    ) -> bytes:
        result = await self.run_git_binary(args, input_bytes=input_bytes, env=env, cwd=cwd)
        if not result.ok:
            _raise_failed(
                result.args,
                result.returncode,
                result.stderr.decode("utf-8", errors="replace"),
            )
        return result.stdout


def _raise_failed(cmd: tuple[str, ...], returncode: int, stderr: str) -> None:
    logger.error(
        f"Git command failed: {' '.join(cmd)} code={returncode} stderr={stderr.strip()}"
    )
    message = stderr.strip() or f"git {cmd[1]} exited with {returncode}"
    raise GitError(message, f"{' '.join(cmd)} -> {returncode}")
