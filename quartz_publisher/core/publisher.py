"""Publish workflow: build the site, then commit and push it."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from quartz_publisher.core.commands import (
    CommandRunner,
    build_site,
    git_add,
    git_commit,
    git_pull,
    git_push,
    write_deployment_config,
)
from quartz_publisher.core.models import (
    CancelledByUser,
    PublishError,
    PublishInProgressError,
    PublishResult,
    PublishSettings,
    PublishStage,
)
from quartz_publisher.ui import notifiers, prompts
from quartz_publisher.ui.notifiers import Notifier, StatusSink
from quartz_publisher.ui.prompts import MessagePrompt

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def default_message(now: datetime) -> str:
    """Build the commit message offered when the user has nothing to say."""
    return f"Updated at {now.strftime(TIMESTAMP_FORMAT)}"


def resolve_message(submitted: Optional[str], default: str) -> str:
    """Turn a prompt answer into the message to commit with.

    Args:
        submitted: What the prompt resolved to, None if dismissed
        default: Message to use when the submission is blank

    Returns:
        The stripped submission, or default when it is blank

    Raises:
        CancelledByUser: The prompt was dismissed
    """
    if submitted is None:
        raise CancelledByUser("Commit cancelled")
    return submitted.strip() or default


class Publisher:
    """Runs the publish and markdown-sync flows one step at a time.

    Only one flow runs per publisher at any moment. A second call made
    while one is in flight is rejected, not queued.
    """

    def __init__(
        self,
        settings: PublishSettings,
        runner: Optional[CommandRunner] = None,
        prompt: Optional[MessagePrompt] = None,
        notify: Optional[Notifier] = None,
        status: Optional[StatusSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize Publisher.

        Args:
            settings: Paths and git options for the run
            runner: Command runner (default: a plain CommandRunner)
            prompt: Commit-message prompt (default: accept the default)
            notify: Receives user-facing notifications
            status: Receives the short status text at each stage
            clock: Returns the time used for the default message
        """
        self.settings = settings
        self.notify = notify or notifiers.silent()
        self.status = status or notifiers.silent()
        self.runner = runner or CommandRunner(notifier=self.notify)
        self.prompt = prompt or prompts.accept_default()
        self.clock = clock or datetime.now
        self.stage = PublishStage.IDLE
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def publish_repo(self) -> Path:
        """Repository the publish flow commits and pushes.

        The Quartz project itself unless publish_repo is set.
        """
        return _expand(self.settings.publish_repo or self.settings.generator_path)

    async def publish(self) -> PublishResult:
        """Build the site and push it to the remote.

        Order: build, deployment config, prompt, add, commit, pull, push.
        Nothing is rolled back when a later step fails.

        Returns:
            PublishResult describing how far the run got
        """
        result = PublishResult(flow="publish")
        if self.busy:
            return self._reject(result)

        async with self._lock:
            html_path = _expand(self.settings.html_path)
            repo = self.publish_repo
            self.notify("Publishing notes to Quartz…")
            try:
                await self._build(html_path)
                result.commit_message = await self._ask_message()

                self._enter(PublishStage.COMMITTING)
                await git_add(self.runner, repo)
                await git_commit(self.runner, repo, result.commit_message)

                self._enter(PublishStage.PULLING)
                await git_pull(self.runner, repo)

                self._enter(PublishStage.PUSHING)
                await git_push(self.runner, repo, self.settings.remote, self.settings.branch)
            except CancelledByUser as e:
                return self._cancel(result, e)
            except (PublishError, OSError) as e:
                return self._fail(result, e)

            self._enter(PublishStage.DONE)
            result.stage = PublishStage.DONE
            self.notify("Published notes to Quartz")
            return result

    async def sync_markdown(self) -> PublishResult:
        """Commit and push the markdown source directory.

        No build and no pull happen in this flow.
        """
        result = PublishResult(flow="sync")
        if self.busy:
            return self._reject(result)

        async with self._lock:
            markdown_path = _expand(self.settings.markdown_path)
            self.notify("Syncing markdown notes…")
            try:
                result.commit_message = await self._ask_message()

                self._enter(PublishStage.COMMITTING)
                await git_add(self.runner, markdown_path)
                await git_commit(self.runner, markdown_path, result.commit_message)

                self._enter(PublishStage.PUSHING)
                await git_push(self.runner, markdown_path, self.settings.remote, self.settings.branch)
            except CancelledByUser as e:
                return self._cancel(result, e)
            except (PublishError, OSError) as e:
                return self._fail(result, e)

            self._enter(PublishStage.DONE, "synced")
            result.stage = PublishStage.DONE
            self.notify("Synced markdown notes")
            return result

    async def _build(self, html_path: Path) -> None:
        self._enter(PublishStage.BUILDING)
        output = await build_site(
            self.runner,
            _expand(self.settings.generator_path),
            _expand(self.settings.markdown_path),
            html_path,
            node_bin=self.settings.node_bin,
        )
        if output:
            logger.debug("Build output:\n%s", output)
        if self.settings.deploy_config:
            write_deployment_config(html_path)

    async def _ask_message(self) -> str:
        default = default_message(self.clock())
        self._enter(PublishStage.AWAITING_MESSAGE)
        submitted = await self.prompt(default)
        return resolve_message(submitted, default)

    def _enter(self, stage: PublishStage, text: Optional[str] = None) -> None:
        self.stage = stage
        logger.info("Stage: %s", stage.name)
        self.status(text or stage.label)

    def _fail(self, result: PublishResult, error: Exception) -> PublishResult:
        failed_at = self.stage
        if failed_at is PublishStage.BUILDING:
            label = "build failed"
        elif result.flow == "sync":
            label = "sync failed"
        else:
            label = PublishStage.FAILED.label
        logger.warning("%s run failed during %s: %s", result.flow, failed_at.name, error)

        self._enter(PublishStage.FAILED, label)
        result.stage = PublishStage.FAILED
        result.failed_at = failed_at
        result.error = str(error)
        self.notify(f"❌ {label.capitalize()}: {error}")
        return result

    def _cancel(self, result: PublishResult, error: CancelledByUser) -> PublishResult:
        logger.info("%s run cancelled at the commit prompt", result.flow)
        self._enter(PublishStage.CANCELLED)
        result.stage = PublishStage.CANCELLED
        result.error = str(error)
        self.notify(f"{error}: nothing was committed")
        return result

    def _reject(self, result: PublishResult) -> PublishResult:
        error = PublishInProgressError("A publish is already running")
        logger.warning("Rejected %s run: %s", result.flow, error)
        result.stage = PublishStage.FAILED
        result.error = str(error)
        self.notify(str(error))
        return result


def _expand(path: str) -> Path:
    return Path(path).expanduser()
