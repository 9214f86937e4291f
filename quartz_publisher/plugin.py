"""Host lifecycle: settings, the publish trigger and the heartbeat timer."""

import asyncio
import contextlib
import logging
from dataclasses import fields
from typing import Any, List, Optional

from quartz_publisher.core.commands import CommandRunner
from quartz_publisher.core.config import SettingsStore, validate_settings
from quartz_publisher.core.models import ConfigurationError, PublishResult, PublishSettings
from quartz_publisher.core.publisher import Publisher
from quartz_publisher.ui import notifiers, prompts
from quartz_publisher.ui.notifiers import Notifier, StatusSink
from quartz_publisher.ui.prompts import MessagePrompt

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 5 * 60


class QuartzPublishPlugin:
    """Ties settings, collaborators and the Publisher together.

    Usage:
        plugin = QuartzPublishPlugin(SettingsStore(), notify=..., prompt=...)
        await plugin.load()
        try:
            await plugin.trigger()
        finally:
            await plugin.unload()
    """

    def __init__(
        self,
        store: SettingsStore,
        notify: Optional[Notifier] = None,
        status: Optional[StatusSink] = None,
        prompt: Optional[MessagePrompt] = None,
        runner: Optional[CommandRunner] = None,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
    ):
        self.store = store
        self.notify = notify or notifiers.silent()
        self.status = status or notifiers.silent()
        self.prompt = prompt or prompts.accept_default()
        self.runner = runner
        self.heartbeat_interval = heartbeat_interval
        self.settings = PublishSettings()
        self._publisher: Optional[Publisher] = None
        self._heartbeat: Optional[asyncio.Task] = None

    def load_settings(self) -> PublishSettings:
        """Read settings from the store.

        An existing publisher is kept so its in-flight guard still holds.
        """
        self.settings = self.store.load()
        if self._publisher is not None:
            self._publisher.settings = self.settings
        logger.info("Loaded settings from %s", self.store.path)
        return self.settings

    async def load(self) -> PublishSettings:
        """Read settings and start the heartbeat."""
        self.load_settings()
        if self._heartbeat is None:
            self._heartbeat = asyncio.create_task(self._beat())
        return self.settings

    async def unload(self) -> None:
        """Stop the heartbeat."""
        task, self._heartbeat = self._heartbeat, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Plugin unloaded")

    @property
    def heartbeat_running(self) -> bool:
        return self._heartbeat is not None and not self._heartbeat.done()

    @property
    def publisher(self) -> Publisher:
        if self._publisher is None:
            self._publisher = Publisher(
                self.settings,
                runner=self.runner,
                prompt=self.prompt,
                notify=self.notify,
                status=self.status,
            )
        return self._publisher

    def check_config(self, announce_valid: bool = True) -> bool:
        """Validate settings, notifying once per problem.

        Args:
            announce_valid: Also notify when everything is fine

        Returns:
            True if the settings are usable
        """
        problems = validate_settings(self.settings)
        for problem in problems:
            self.notify(f"❌ {problem}")
        if problems:
            logger.warning("Invalid configuration: %s", ConfigurationError(problems))
            return False
        if announce_valid:
            self.notify("✅ Configuration is valid")
        return True

    def update_settings(self, **changes: Any) -> PublishSettings:
        """Apply settings edits and save them straight away.

        Raises:
            ConfigurationError: A key is not a known setting
        """
        known = {f.name for f in fields(PublishSettings)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigurationError([f"Unknown setting: {key}" for key in unknown])

        for key, value in changes.items():
            setattr(self.settings, key, value)
        self.store.save(self.settings)
        return self.settings

    async def trigger(self) -> List[PublishResult]:
        """Publish the site, then sync the markdown notes if enabled.

        Returns:
            One result per flow that ran; empty if validation failed
        """
        if not self.check_config(announce_valid=False):
            return []

        results = [await self.publisher.publish()]
        if self.settings.sync_markdown:
            results.append(await self.publisher.sync_markdown())
        return results

    async def sync(self) -> Optional[PublishResult]:
        """Sync the markdown notes on their own.

        Returns:
            The sync result, or None if validation failed
        """
        if not self.check_config(announce_valid=False):
            return None
        return await self.publisher.sync_markdown()

    async def _beat(self) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            busy = self._publisher is not None and self._publisher.busy
            logger.debug("Heartbeat: %s", "busy" if busy else "idle")
