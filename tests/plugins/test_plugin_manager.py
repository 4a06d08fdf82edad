"""Tests for the plugin manager's load/reload lifecycle."""

import asyncio

import pytest
from dotenv import dotenv_values

from telebox.errors import ReloadError
from telebox.plugins.hooks import HookEvent

from conftest import PING_PLUGIN

ID_PLUGIN = '''
from telebox.plugins.base import Plugin


async def show_id(message):
    await message.edit(f"chat {message.chat_id}")


class IdPlugin(Plugin):
    description = "ids"
    cmd_handlers = {"myid": show_id}


plugin = IdPlugin()
'''

LISTENER_PLUGIN = '''
from telebox.plugins.base import Plugin

seen = []


class Listener(Plugin):
    description = "listens"
    ignore_edited = True

    async def listen_message_handler(self, message):
        seen.append(message.text)
        if message.text == "explode":
            raise RuntimeError("listener failed")


plugin = Listener()
'''

CRON_PLUGIN = '''
from telebox.plugins.base import CronTask, Plugin


async def tick(client):
    pass


class Ticker(Plugin):
    description = "ticks"
    cron_tasks = {"{name}": CronTask("0 0 3 * * *", tick, "nightly")}


plugin = Ticker()
'''


@pytest.fixture
def plugins(user_dir):
    (user_dir / "ping.py").write_text(PING_PLUGIN)
    (user_dir / "myid.py").write_text(ID_PLUGIN)
    return user_dir


@pytest.mark.asyncio
async def test_end_to_end_ping(manager, client, plugins):
    report = await manager.reload()
    assert {"ping", "myid"} <= set(report.loaded)

    message = await client.deliver(42, ".ping", is_self_chat=True)
    assert client.messages[(42, message.id)].text == "pong"

    edits_before = list(client.edits)
    unknown = await client.deliver(42, ".unknown", is_self_chat=True)
    assert client.edits == edits_before
    assert client.messages[(42, unknown.id)].text == ".unknown"

    await manager.shutdown()


@pytest.mark.asyncio
async def test_others_messages_are_not_dispatched(manager, client, plugins):
    await manager.reload()
    message = await client.deliver(42, ".ping", sender_id=7)
    assert client.messages[(42, message.id)].text == ".ping"
    await manager.shutdown()


@pytest.mark.asyncio
async def test_reload_is_idempotent(manager, client, plugins, alias_store):
    (plugins / "ticker.py").write_text(CRON_PLUGIN.replace("{name}", "nightly"))
    alias_store.set("p", "ping")
    first = await manager.reload()
    assert first.cron_jobs
    jobs = manager.scheduler.names()
    snapshot = manager.registry.snapshot()
    handlers = len(client.list_event_handlers())

    second = await manager.reload()
    assert manager.registry.snapshot() == snapshot
    assert second.commands == first.commands
    assert second.cron_jobs == first.cron_jobs
    assert manager.scheduler.names() == jobs
    assert len(client.list_event_handlers()) == handlers
    await manager.shutdown()


@pytest.mark.asyncio
async def test_alias_round_trip(manager, client, plugins, alias_store):
    alias_store.set("p", "ping")
    report = await manager.reload()

    assert "p(ping)" in report.commands
    entry = manager.registry.resolve("p")
    assert entry.original == "ping"
    assert entry.handler_for("p") is manager.registry.resolve("ping").handler_for("ping")

    message = await client.deliver(1, ".p", out=True)
    assert client.messages[(1, message.id)].text == "pong"
    await manager.shutdown()


@pytest.mark.asyncio
async def test_malformed_plugin_is_skipped(manager, plugins):
    (plugins / "broken.py").write_text("plugin = 'not a plugin'\n")
    report = await manager.reload()

    assert any(path.endswith("broken.py") for path in report.rejected)
    assert manager.registry.resolve("ping") is not None
    await manager.shutdown()


@pytest.mark.asyncio
async def test_duplicate_cron_name_is_rejected(manager, user_dir):
    (user_dir / "a_ticker.py").write_text(CRON_PLUGIN.replace("{name}", "nightly"))
    (user_dir / "b_ticker.py").write_text(CRON_PLUGIN.replace("{name}", "nightly"))
    report = await manager.reload()

    assert report.cron_jobs.count("nightly") == 1
    assert len(manager.scheduler) == len(report.cron_jobs)
    await manager.shutdown()
    assert len(manager.scheduler) == 0


@pytest.mark.asyncio
async def test_listener_isolation_and_edited_policy(manager, client, user_dir):
    (user_dir / "listener.py").write_text(LISTENER_PLUGIN)
    await manager.reload()
    loaded = next(p for p in manager.plugins if p.name == "listener")
    seen = type(loaded.plugin).listen_message_handler.__globals__["seen"]

    await client.deliver(1, "explode", sender_id=5)
    await client.deliver(1, "hello", sender_id=5)
    await client.deliver(1, "edited", edited=True, sender_id=5)

    assert seen == ["explode", "hello"]
    await manager.shutdown()


@pytest.mark.asyncio
async def test_reload_detaches_previous_handlers(manager, client, plugins):
    await manager.reload()
    await manager.reload()
    await manager.shutdown()
    assert client.list_event_handlers() == []


@pytest.mark.asyncio
async def test_failed_build_keeps_previous_registry(manager, plugins, monkeypatch):
    await manager.reload()
    before = manager.registry

    def explode(original):
        raise RuntimeError("store offline")

    monkeypatch.setattr(manager.alias_store, "aliases_for", explode)
    with pytest.raises(ReloadError):
        await manager.reload()
    assert manager.registry is before
    await manager.shutdown()


@pytest.mark.asyncio
async def test_user_plugin_overrides_builtin(manager, client, user_dir):
    (user_dir / "help.py").write_text(PING_PLUGIN.replace('"ping"', '"help"'))
    await manager.reload()

    message = await client.deliver(1, ".help", out=True)
    assert client.messages[(1, message.id)].text == "pong"
    await manager.shutdown()


@pytest.mark.asyncio
async def test_reload_emits_hook(manager, plugins):
    reports = []

    async def on_reload(report):
        reports.append(report)

    manager.hooks.on(HookEvent.ON_RELOAD, on_reload)
    report = await manager.reload()
    assert reports == [report]
    await manager.shutdown()


def test_set_prefixes_persists(manager, tmp_path):
    assert manager.set_prefixes(["!", "?"])
    assert manager.prefixes.as_list() == ["!", "?"]
    assert manager.dispatcher.prefixes.match("?ping") == "?"
    assert dotenv_values(tmp_path / ".env")["TB_PREFIX"] == "! ?"


def test_set_prefixes_rejects_empty(manager):
    with pytest.raises(ValueError):
        manager.set_prefixes([], persist=False)
    assert manager.prefixes.as_list() == [".", "!"]


@pytest.mark.asyncio
async def test_offline_manager_attaches_nothing(settings, alias_store, user_dir):
    from telebox.plugins.manager import PluginManager

    (user_dir / "ping.py").write_text(PING_PLUGIN)
    manager = PluginManager(settings, None, alias_store, user_dir=user_dir)
    report = await manager.reload()

    assert "ping" in report.commands
    assert manager.client is None
    await manager.shutdown()
    await asyncio.sleep(0)
