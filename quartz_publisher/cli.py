"""
Click-based CLI for quartz-publisher.

Usage:
    quartz-publish publish         Build, commit and push the site
    quartz-publish sync            Commit and push the markdown notes
    quartz-publish check           Validate the configured paths
    quartz-publish config show     Print the current settings
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Awaitable, Callable, Optional, TypeVar

import click
import yaml

from quartz_publisher import __version__
from quartz_publisher.core.config import SettingsStore, coerce_value
from quartz_publisher.core.models import ConfigurationError
from quartz_publisher.plugin import QuartzPublishPlugin
from quartz_publisher.ui import notifiers, prompts

T = TypeVar("T")


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Settings file (default: ~/.config/quartz-publisher/settings.yaml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every command that runs.")
@click.version_option(version=__version__, prog_name="quartz-publish")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], verbose: bool) -> None:
    """Publish markdown notes as a Quartz site and push them with git."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.obj = SettingsStore(config_path)


def _make_plugin(store: SettingsStore, message: Optional[str] = None, yes: bool = False) -> QuartzPublishPlugin:
    if message is not None:
        prompt = prompts.fixed(message)
    elif yes:
        prompt = prompts.accept_default()
    else:
        prompt = prompts.console()
    return QuartzPublishPlugin(
        store,
        notify=notifiers.console(),
        status=notifiers.status_line(),
        prompt=prompt,
    )


async def _session(plugin: QuartzPublishPlugin, action: Callable[[], Awaitable[T]]) -> T:
    await plugin.load()
    try:
        return await action()
    finally:
        await plugin.unload()


def _run(plugin: QuartzPublishPlugin, action: Callable[[], Awaitable[T]]) -> T:
    # A plain loop keeps the default SIGINT handler, so Ctrl-C at the commit
    # prompt raises inside click.prompt instead of cancelling the main task.
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(_session(plugin, action))
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        loop.run_until_complete(plugin.unload())
        raise click.Abort()
    finally:
        loop.close()


message_option = click.option(
    "-m", "--message", default=None, help="Commit message; skips the prompt."
)
yes_option = click.option(
    "-y", "--yes", is_flag=True, help="Commit with the default message without asking."
)


@cli.command("publish")
@message_option
@yes_option
@click.pass_obj
def publish(store: SettingsStore, message: Optional[str], yes: bool) -> None:
    """Build the site, then commit, pull and push it.

    Also syncs the markdown notes when sync_markdown is enabled.
    """
    plugin = _make_plugin(store, message, yes)
    results = _run(plugin, plugin.trigger)
    if not results or not all(r.success for r in results):
        raise SystemExit(1)


@cli.command("sync")
@message_option
@yes_option
@click.pass_obj
def sync(store: SettingsStore, message: Optional[str], yes: bool) -> None:
    """Commit and push the markdown notes only."""
    plugin = _make_plugin(store, message, yes)
    result = _run(plugin, plugin.sync)
    if result is None or not result.success:
        raise SystemExit(1)


@cli.command("check")
@click.pass_obj
def check(store: SettingsStore) -> None:
    """Check that every configured path exists."""
    plugin = _make_plugin(store, yes=True)
    try:
        plugin.load_settings()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    if not plugin.check_config():
        raise SystemExit(1)


@cli.group("config")
def config() -> None:
    """View or change settings."""


@config.command("show")
@click.pass_obj
def config_show(store: SettingsStore) -> None:
    """Print the current settings."""
    try:
        settings = store.load()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"# {store.path}")
    click.echo(yaml.safe_dump(asdict(settings), default_flow_style=False, sort_keys=False).rstrip())


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def config_set(store: SettingsStore, key: str, value: str) -> None:
    """Set KEY to VALUE and save."""
    plugin = _make_plugin(store, yes=True)
    try:
        plugin.load_settings()
        plugin.update_settings(**{key: coerce_value(key, value)})
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"{key} = {getattr(plugin.settings, key)!r}")


def main() -> None:
    cli()
