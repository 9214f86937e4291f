"""Notification and status factories for Quartz Publisher.

A notifier shows a one-off message to the user. A status sink shows the
short text describing where the current run is. Both are plain callables
so any UI can supply its own.
"""

import logging
from typing import Callable, Optional

import click

Notifier = Callable[[str], None]
StatusSink = Callable[[str], None]


def console(err: bool = False) -> Notifier:
    """Create a notifier that echoes messages to the terminal.

    Args:
        err: Write to stderr instead of stdout

    Returns:
        A notifier function (text) -> None
    """
    def notify(text: str) -> None:
        click.echo(text, err=err)
    return notify


def status_line() -> StatusSink:
    """Create a status sink that echoes dimmed status lines."""
    def status(text: str) -> None:
        click.secho(f"[{text}]", dim=True)
    return status


def logging_notifier(
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
) -> Notifier:
    """Create a notifier that writes messages to a logger."""
    target = logger or logging.getLogger("quartz_publisher")

    def notify(text: str) -> None:
        target.log(level, "%s", text)
    return notify


def silent() -> Notifier:
    """Create a notifier that discards everything."""
    def notify(text: str) -> None:
        return None
    return notify
