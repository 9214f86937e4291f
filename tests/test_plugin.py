"""Tests for QuartzPublishPlugin."""

import asyncio

import pytest

from helpers import RecordingRunner
from quartz_publisher.core.config import SettingsStore
from quartz_publisher.core.models import ConfigurationError, PublishStage
from quartz_publisher.plugin import QuartzPublishPlugin
from quartz_publisher.ui import prompts


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store(tmp_path, settings):
    store = SettingsStore(tmp_path / "settings.yaml")
    store.save(settings)
    return store


def make_plugin(store, runner=None, prompt=None, notes=None, **kwargs):
    return QuartzPublishPlugin(
        store,
        notify=(notes if notes is not None else []).append,
        prompt=prompt or prompts.accept_default(),
        runner=runner or RecordingRunner(),
        **kwargs,
    )


async def session(plugin, action):
    await plugin.load()
    try:
        return await action()
    finally:
        await plugin.unload()


class TestLifecycle:
    """Tests for load/unload and the heartbeat."""

    def test_load_reads_settings(self, store, settings):
        plugin = make_plugin(store)

        async def scenario():
            loaded = await plugin.load()
            await plugin.unload()
            return loaded

        assert run(scenario()) == settings

    def test_heartbeat_stops_on_unload(self, store):
        plugin = make_plugin(store, heartbeat_interval=0.01)

        async def scenario():
            await plugin.load()
            running = plugin.heartbeat_running
            await asyncio.sleep(0.05)
            still_running = plugin.heartbeat_running
            await plugin.unload()
            return running, still_running

        running, still_running = run(scenario())

        assert running and still_running
        assert not plugin.heartbeat_running

    def test_heartbeat_does_not_create_publisher(self, store):
        plugin = make_plugin(store, heartbeat_interval=0.01)

        async def scenario():
            await plugin.load()
            await asyncio.sleep(0.05)
            await plugin.unload()

        run(scenario())

        assert plugin._publisher is None

    def test_reload_keeps_publisher(self, store, settings):
        plugin = make_plugin(store)
        plugin.load_settings()
        publisher = plugin.publisher
        settings.branch = "main"
        store.save(settings)

        plugin.load_settings()

        assert plugin.publisher is publisher
        assert publisher.settings.branch == "main"

    def test_reload_during_publish_still_rejects_second_run(self, store):
        runner = RecordingRunner()
        entered = asyncio.Event()
        release = asyncio.Event()

        async def prompt(default):
            entered.set()
            await release.wait()
            return "First run"

        plugin = make_plugin(store, runner=runner, prompt=prompt)

        async def scenario():
            await plugin.load()
            try:
                first = asyncio.create_task(plugin.trigger())
                await entered.wait()
                plugin.load_settings()
                second = await plugin.trigger()
                release.set()
                return await first, second
            finally:
                await plugin.unload()

        first, second = run(scenario())

        assert first[0].success
        assert second[0].stage is PublishStage.FAILED
        assert "already running" in second[0].error
        assert runner.steps == ["build", "add", "commit", "pull", "push"]

    def test_unload_without_load(self, store):
        run(make_plugin(store).unload())


class TestCheckConfig:
    """Tests for check_config."""

    def test_valid_configuration_announced(self, store):
        notes = []
        plugin = make_plugin(store, notes=notes)
        plugin.load_settings()

        assert plugin.check_config() is True
        assert notes == ["✅ Configuration is valid"]

    def test_one_notification_per_problem(self, tmp_path):
        notes = []
        plugin = make_plugin(SettingsStore(tmp_path / "none.yaml"), notes=notes)
        plugin.load_settings()

        assert plugin.check_config() is False
        assert len(notes) == 3
        assert "generator_path" in notes[0]


class TestTrigger:
    """Tests for trigger and sync."""

    @pytest.mark.parametrize("field", ["generator_path", "markdown_path", "html_path"])
    def test_invalid_configuration_runs_nothing(self, store, tmp_path, field):
        runner = RecordingRunner()
        notes = []
        plugin = make_plugin(store, runner=runner, notes=notes)
        plugin.load_settings()
        plugin.update_settings(**{field: str(tmp_path / "missing")})

        results = run(session(plugin, plugin.trigger))

        assert results == []
        assert runner.calls == []
        assert any(field in note for note in notes)

    def test_publish_only(self, store):
        runner = RecordingRunner()
        plugin = make_plugin(store, runner=runner)

        results = run(session(plugin, plugin.trigger))

        assert [r.flow for r in results] == ["publish"]
        assert results[0].success
        assert runner.steps == ["build", "add", "commit", "pull", "push"]

    def test_publish_then_sync_markdown(self, store, settings):
        settings.sync_markdown = True
        store.save(settings)
        runner = RecordingRunner()
        plugin = make_plugin(store, runner=runner)

        results = run(session(plugin, plugin.trigger))

        assert [r.flow for r in results] == ["publish", "sync"]
        assert all(r.success for r in results)
        assert runner.steps == ["build", "add", "commit", "pull", "push", "add", "commit", "push"]
        assert runner.calls[-1][1] == settings.markdown_path

    def test_sync_runs_after_failed_publish(self, store, settings):
        settings.sync_markdown = True
        store.save(settings)
        runner = RecordingRunner(fail_on={"build"})
        plugin = make_plugin(store, runner=runner)

        results = run(session(plugin, plugin.trigger))

        assert results[0].stage is PublishStage.FAILED
        assert results[1].success

    def test_sync_alone(self, store):
        runner = RecordingRunner()
        plugin = make_plugin(store, runner=runner)

        result = run(session(plugin, plugin.sync))

        assert result.flow == "sync"
        assert runner.steps == ["add", "commit", "push"]

    def test_sync_with_invalid_configuration(self, tmp_path):
        plugin = make_plugin(SettingsStore(tmp_path / "none.yaml"))

        assert run(session(plugin, plugin.sync)) is None


class TestUpdateSettings:
    """Tests for update_settings."""

    def test_changes_are_saved(self, store):
        plugin = make_plugin(store)
        plugin.load_settings()

        plugin.update_settings(branch="main", sync_markdown=True)

        reloaded = store.load()
        assert reloaded.branch == "main"
        assert reloaded.sync_markdown is True

    def test_publisher_sees_changes(self, store):
        runner = RecordingRunner()
        plugin = make_plugin(store, runner=runner)
        plugin.load_settings()
        plugin.update_settings(remote="upstream")

        run(plugin.publisher.publish())

        assert runner.calls[-1][0] == ["git", "push", "upstream", "master"]

    def test_unknown_key_rejected(self, store):
        plugin = make_plugin(store)
        plugin.load_settings()

        with pytest.raises(ConfigurationError):
            plugin.update_settings(quartzPath="/q")
