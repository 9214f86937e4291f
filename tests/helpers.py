"""Test doubles shared by the test modules."""

import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Set

from quartz_publisher.core.commands import CommandRunner
from quartz_publisher.core.models import CommandExecutionError


def step_name(command) -> str:
    """Name a recorded command: 'build' for Quartz, the git subcommand otherwise."""
    if isinstance(command, str):
        return command
    if command[0] == "npx":
        return "build"
    return command[1]


class RecordingRunner(CommandRunner):
    """Records commands instead of running them, failing on request."""

    def __init__(self, fail_on: Optional[Set[str]] = None):
        super().__init__()
        self.calls: List[tuple] = []
        self.envs: List[Optional[Dict[str, str]]] = []
        self.fail_on = set(fail_on or [])

    @property
    def steps(self) -> List[str]:
        return [step_name(command) for command, _ in self.calls]

    async def run(self, command, cwd, notify=False, env=None):
        command = list(command) if not isinstance(command, str) else command
        self.calls.append((command, str(cwd)))
        self.envs.append(env)
        name = step_name(command)
        if name in self.fail_on:
            raise CommandExecutionError(command, str(cwd), 1, "", f"{name} exploded")
        return ""


class FakeBuildRunner(CommandRunner):
    """Runs git for real but replaces the Quartz build with a stub page."""

    def __init__(self):
        super().__init__()
        self.builds: List[List[str]] = []

    async def run(self, command, cwd, notify=False, env=None):
        if not isinstance(command, str) and command[0] == "npx":
            self.builds.append(list(command))
            output_dir = Path(command[command.index("-o") + 1])
            (output_dir / "index.html").write_text("<h1>Garden</h1>\n")
            return "Done"
        return await super().run(command, cwd, notify=notify, env=env)


def git(*args: str, cwd: Path) -> str:
    """Run git synchronously and return trimmed stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()
