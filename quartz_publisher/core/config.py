"""Settings storage and validation."""

import logging
import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from quartz_publisher.core.models import ConfigurationError, PublishSettings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "QUARTZ_PUBLISHER_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "quartz-publisher" / "settings.yaml"

# Fields that must name an existing directory, with their display names
REQUIRED_PATHS = {
    "generator_path": "Quartz project path",
    "markdown_path": "Markdown source path",
    "html_path": "HTML output path",
}

BOOLEAN_FIELDS = ("sync_markdown", "deploy_config")
# Blank values for these mean "unset"
OPTIONAL_FIELDS = ("node_bin", "publish_repo")


def default_config_path() -> Path:
    """Return the settings file path, honouring QUARTZ_PUBLISHER_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


class SettingsStore:
    """Loads and saves PublishSettings as a YAML file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path).expanduser() if path else default_config_path()

    def load(self) -> PublishSettings:
        """Load settings, falling back to defaults for anything missing.

        Returns:
            PublishSettings merged over the defaults

        Raises:
            ConfigurationError: The file exists but is not a YAML mapping
        """
        if not self.path.exists():
            logger.debug("No settings file at %s, using defaults", self.path)
            return PublishSettings()

        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError([f"Invalid YAML in {self.path}: {e}"]) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError([f"Settings file {self.path} must contain a mapping"])

        return settings_from_dict(data)

    def save(self, settings: PublishSettings) -> None:
        """Write settings to the YAML file, creating its directory."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(asdict(settings), f, default_flow_style=False, sort_keys=False)
        logger.debug("Saved settings to %s", self.path)


def settings_from_dict(data: Dict[str, Any]) -> PublishSettings:
    """Build PublishSettings from a plain mapping, ignoring unknown keys.

    Raises:
        ConfigurationError: A flag holds something other than a boolean
    """
    known = {f.name for f in fields(PublishSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))

    values = {}
    for key, value in data.items():
        if key not in known:
            continue
        if key in BOOLEAN_FIELDS and not isinstance(value, bool):
            if not isinstance(value, str):
                raise ConfigurationError([f"{key} must be true or false, got {value!r}"])
            value = coerce_value(key, value)
        values[key] = value
    return PublishSettings(**values)


def coerce_value(key: str, value: str) -> Any:
    """Convert a string from the command line to the type of a settings field.

    Raises:
        ConfigurationError: Unknown key, or a value that does not fit the field
    """
    if key not in {f.name for f in fields(PublishSettings)}:
        raise ConfigurationError([f"Unknown setting: {key}"])

    if key in BOOLEAN_FIELDS:
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ConfigurationError([f"{key} must be true or false, got {value!r}"])

    if key in OPTIONAL_FIELDS and not value.strip():
        return None

    return value


def validate_settings(settings: PublishSettings) -> List[str]:
    """Check that every required path is set and exists.

    An explicit publish_repo must exist too.

    Args:
        settings: Settings to check

    Returns:
        One message per problem, each naming the offending field
    """
    problems = []
    for name, label in REQUIRED_PATHS.items():
        value = getattr(settings, name)
        if not value or not str(value).strip():
            problems.append(f"{label} ({name}) is not set")
        elif not Path(value).expanduser().exists():
            problems.append(f"{label} ({name}) does not exist: {value}")

    if settings.publish_repo and not Path(settings.publish_repo).expanduser().exists():
        problems.append(f"Publish repository (publish_repo) does not exist: {settings.publish_repo}")
    return problems


def ensure_valid(settings: PublishSettings) -> None:
    """Raise ConfigurationError when validate_settings reports problems."""
    problems = validate_settings(settings)
    if problems:
        raise ConfigurationError(problems)
