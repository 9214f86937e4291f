"""Core components for Quartz Publisher."""

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
from quartz_publisher.core.commands import CommandRunner, build_site, write_deployment_config
from quartz_publisher.core.config import SettingsStore, ensure_valid, validate_settings
from quartz_publisher.core.publisher import Publisher, default_message, resolve_message

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
    "build_site",
    "write_deployment_config",
    "SettingsStore",
    "ensure_valid",
    "validate_settings",
    "Publisher",
    "default_message",
    "resolve_message",
]
