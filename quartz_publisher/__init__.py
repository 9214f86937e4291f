"""
Quartz Publisher - Publish Obsidian notes as a Quartz site with git

Automates the publish workflow of a notes vault:
- Static site build with Quartz
- Deployment descriptor for clean URLs
- Commit, pull and push of the built site
- Optional sync of the markdown source repository
"""

__version__ = "0.1.0"

from quartz_publisher.core.models import (
    CancelledByUser,
    CommandExecutionError,
    ConfigurationError,
    PublishError,
    PublishInProgressError,
    PublishResult,
    PublishSettings,
    PublishStage,
)
from quartz_publisher.core.commands import CommandRunner
from quartz_publisher.core.config import SettingsStore
from quartz_publisher.core.publisher import Publisher
from quartz_publisher.plugin import QuartzPublishPlugin

__all__ = [
    "CancelledByUser",
    "CommandExecutionError",
    "ConfigurationError",
    "PublishError",
    "PublishInProgressError",
    "PublishResult",
    "PublishSettings",
    "PublishStage",
    "CommandRunner",
    "SettingsStore",
    "Publisher",
    "QuartzPublishPlugin",
]
