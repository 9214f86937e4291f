"""Subprocess execution and the git/site commands built on it."""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from quartz_publisher.core.models import Command, CommandExecutionError
from quartz_publisher.ui.notifiers import Notifier

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEPLOYMENT_CONFIG: Dict[str, Any] = {"cleanUrls": True}
DEPLOYMENT_CONFIG_FILENAME = "vercel.json"


class CommandRunner:
    """Runs one command at a time and returns its trimmed stdout.

    Argument lists are executed directly. A plain string is handed to the
    system shell as-is so pipes, globs and variable expansion work; only
    pass strings that come from trusted local configuration.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        env: Optional[Dict[str, str]] = None,
    ):
        """Initialize CommandRunner.

        Args:
            notifier: Receives failure text for calls made with notify=True
            env: Extra environment variables for every command
        """
        self.notifier = notifier
        self.env = dict(env or {})

    async def run(
        self,
        command: Command,
        cwd: PathLike,
        notify: bool = False,
        env: Optional[Dict[str, str]] = None,
    ) -> str:
        """Run a command in cwd and wait for it to finish.

        Args:
            command: Argument list, or a shell command line
            cwd: Working directory for the command
            notify: Also send the failure text to the notifier
            env: Extra environment variables for this command only

        Returns:
            Captured stdout with surrounding whitespace removed

        Raises:
            CommandExecutionError: The command exited nonzero or could not start
        """
        cwd = str(cwd)
        if not isinstance(command, str):
            command = [str(arg) for arg in command]
        process_env = self._build_env(env)

        logger.debug("Running %s in %s", _display(command), cwd)
        try:
            if isinstance(command, str):
                process = await asyncio.create_subprocess_shell(
                    command,
                    cwd=cwd,
                    env=process_env,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            else:
                process = await asyncio.create_subprocess_exec(
                    *command,
                    cwd=cwd,
                    env=process_env,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
        except (OSError, ValueError) as e:
            error = CommandExecutionError(command, cwd, stderr=str(e))
            self._report(error, notify)
            raise error from e

        stdout, stderr = await process.communicate()
        out = _decode(stdout)
        err = _decode(stderr)

        if process.returncode != 0:
            error = CommandExecutionError(command, cwd, process.returncode, out, err)
            self._report(error, notify)
            raise error

        return out.strip()

    def _build_env(self, env: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if not self.env and not env:
            return None
        merged = dict(os.environ)
        merged.update(self.env)
        merged.update(env or {})
        return merged

    def _report(self, error: CommandExecutionError, notify: bool) -> None:
        logger.warning("%s", error)
        if notify and self.notifier:
            self.notifier(f"Command failed: {error}")


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _display(command: Command) -> str:
    return command if isinstance(command, str) else " ".join(command)


async def git_add(runner: CommandRunner, repo: PathLike) -> None:
    """Stage the whole working tree."""
    await runner.run(["git", "add", "."], repo)


async def git_commit(runner: CommandRunner, repo: PathLike, message: str) -> None:
    """Commit staged changes with the given message."""
    await runner.run(["git", "commit", "-m", message], repo)


async def git_pull(runner: CommandRunner, repo: PathLike) -> None:
    """Integrate upstream changes into the current branch."""
    await runner.run(["git", "pull"], repo)


async def git_push(
    runner: CommandRunner,
    repo: PathLike,
    remote: str = "origin",
    branch: str = "master",
) -> None:
    """Push branch to remote."""
    await runner.run(["git", "push", remote, branch], repo)


async def build_site(
    runner: CommandRunner,
    generator_path: PathLike,
    markdown_path: PathLike,
    html_path: PathLike,
    node_bin: Optional[str] = None,
) -> str:
    """Build the static site with Quartz.

    Args:
        runner: Runner used to execute the build
        generator_path: Quartz project directory, used as working directory
        markdown_path: Directory of markdown notes to build from
        html_path: Directory the generated site is written to
        node_bin: Directory holding node/npx, prepended to PATH

    Returns:
        The build's stdout
    """
    env = None
    if node_bin:
        env = {"PATH": os.pathsep.join([node_bin, os.environ.get("PATH", "")])}

    command = ["npx", "quartz", "build", "-d", str(markdown_path), "-o", str(html_path)]
    return await runner.run(command, generator_path, env=env)


def write_deployment_config(
    html_path: PathLike,
    payload: Optional[Dict[str, Any]] = None,
    filename: str = DEPLOYMENT_CONFIG_FILENAME,
) -> Path:
    """Write the deployment descriptor into the site output directory.

    Returns:
        Path of the written file
    """
    target = Path(html_path) / filename
    data = DEPLOYMENT_CONFIG if payload is None else payload
    target.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote %s", target)
    return target
