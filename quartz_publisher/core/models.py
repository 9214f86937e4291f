"""Data models for Quartz Publisher."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

Command = Union[str, Sequence[str]]


@dataclass
class PublishSettings:
    """User-editable settings for the publish workflow.

    The three paths must exist before a publish can run. Everything else
    has a usable default.
    """
    generator_path: str = ""
    markdown_path: str = ""
    html_path: str = ""
    sync_markdown: bool = False
    remote: str = "origin"
    branch: str = "master"
    node_bin: Optional[str] = None
    deploy_config: bool = True
    # Repository committed by the publish flow; None means generator_path
    publish_repo: Optional[str] = None


class PublishStage(Enum):
    """Stages of a publish run, with the status text shown for each."""
    IDLE = "idle"
    BUILDING = "building…"
    AWAITING_MESSAGE = "awaiting commit…"
    COMMITTING = "committing…"
    PULLING = "pulling…"
    PUSHING = "publishing…"
    DONE = "published"
    FAILED = "publish failed"
    CANCELLED = "publish cancelled"

    @property
    def label(self) -> str:
        return self.value


@dataclass
class PublishResult:
    """Result of a publish or sync run."""
    flow: str
    stage: PublishStage = PublishStage.IDLE
    commit_message: Optional[str] = None
    error: Optional[str] = None
    failed_at: Optional[PublishStage] = None

    @property
    def success(self) -> bool:
        return self.stage is PublishStage.DONE


class PublishError(Exception):
    """Base class for every error raised by Quartz Publisher."""


class ConfigurationError(PublishError):
    """One or more required settings are empty or point nowhere."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid configuration")


class CommandExecutionError(PublishError):
    """A subprocess exited nonzero or could not be started."""

    def __init__(
        self,
        command: Command,
        cwd: str,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command
        self.cwd = cwd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(self._describe())

    @property
    def command_line(self) -> str:
        if isinstance(self.command, str):
            return self.command
        return " ".join(self.command)

    def _describe(self) -> str:
        if self.returncode is None:
            head = f"Command failed to start: {self.command_line}"
        else:
            head = f"Command failed with exit code {self.returncode}: {self.command_line}"
        detail = self.stderr.strip() or self.stdout.strip()
        return f"{head}\n{detail}" if detail else head


class CancelledByUser(PublishError):
    """The commit-message prompt was dismissed without submitting."""


class PublishInProgressError(PublishError):
    """A publish or sync is already running on this publisher."""
