"""Tests for the unconditional (sudo) relay."""

import pytest

from telebox.relay.base import AuthSnapshot

from conftest import PING_PLUGIN


async def start(manager, user_dir):
    (user_dir / "ping.py").write_text(PING_PLUGIN)
    await manager.reload()
    return manager.registry.resolve("sudo").plugin.relay


def test_snapshot_allows():
    snapshot = AuthSnapshot(principals=frozenset({5}), chats=frozenset())
    assert snapshot.allows(5, 1)
    assert not snapshot.allows(6, 1)
    assert not snapshot.allows(None, 1)
    assert not snapshot.allows(5, None)

    restricted = AuthSnapshot(principals=frozenset({5}), chats=frozenset({10}))
    assert restricted.allows(5, 10)
    assert not restricted.allows(5, 11)


@pytest.mark.asyncio
async def test_empty_allow_list_relays_in_any_chat(manager, client, user_dir):
    relay = await start(manager, user_dir)
    relay.store.add(5, "friend")
    relay.cache.invalidate()

    trigger = await client.deliver(77, ".ping", sender_id=5, reply_to_msg_id=3)

    assert len(client.sent) == 1
    sent = client.sent[0]
    assert sent.chat_id == 77
    assert sent.reply_to_msg_id == 3
    assert client.messages[(77, sent.id)].text == "pong"
    assert client.messages[(77, trigger.id)].text == ".ping"
    await manager.shutdown()


@pytest.mark.asyncio
async def test_chat_outside_allow_list_is_ignored(manager, client, user_dir):
    relay = await start(manager, user_dir)
    relay.store.add(5, "friend")
    relay.store.add_chat(10, "group")
    relay.cache.invalidate()

    await client.deliver(77, ".ping", sender_id=5)
    assert client.sent == []

    await client.deliver(10, ".ping", sender_id=5)
    assert len(client.sent) == 1
    await manager.shutdown()


@pytest.mark.asyncio
async def test_unauthorized_and_non_command_messages_are_ignored(manager, client, user_dir):
    relay = await start(manager, user_dir)
    relay.store.add(5, "friend")
    relay.cache.invalidate()

    await client.deliver(1, ".ping", sender_id=6)
    await client.deliver(1, "just chatting", sender_id=5)
    await client.deliver(1, ".unknown", sender_id=5)
    assert client.sent == []
    assert client.edits == []
    await manager.shutdown()


@pytest.mark.asyncio
async def test_add_principal_by_target(manager, client, user_dir):
    relay = await start(manager, user_dir)

    message = await client.deliver(1, ".sudo add 5", out=True)

    assert [p.uid for p in relay.store.principals()] == [5]
    assert "Added" in client.last_edit_text()
    await relay.drain()
    assert (1, message.id) in client.deleted
    await manager.shutdown()


@pytest.mark.asyncio
async def test_add_principal_by_reply_then_remove(manager, client, user_dir):
    relay = await start(manager, user_dir)
    target = client.incoming(1, "hi", sender_id=9)

    await client.deliver(1, ".sudo add", out=True, reply_to_msg_id=target.id)
    assert [p.uid for p in relay.store.principals()] == [9]
    assert relay.authorized(client.incoming(1, "x", sender_id=9))

    await client.deliver(1, ".sudo del 9", out=True)
    assert relay.store.principals() == []
    assert not relay.authorized(client.incoming(1, "x", sender_id=9))
    await manager.shutdown()


@pytest.mark.asyncio
async def test_add_without_target_or_reply(manager, client, user_dir):
    relay = await start(manager, user_dir)
    await client.deliver(1, ".sudo add", out=True)
    assert "Reply" in client.last_edit_text()
    assert relay.store.principals() == []
    await manager.shutdown()


@pytest.mark.asyncio
async def test_chat_commands(manager, client, user_dir):
    relay = await start(manager, user_dir)

    await client.deliver(1, ".sudo chat ls", out=True)
    assert "every chat" in client.last_edit_text()

    await client.deliver(-100, ".sudo chat add", out=True)
    assert [c.id for c in relay.store.chats()] == [-100]

    await client.deliver(-100, ".sudo chat ls", out=True)
    assert "Allowed chats" in client.last_edit_text()

    await client.deliver(-100, ".sudo chat del", out=True)
    assert relay.store.chats() == []
    await manager.shutdown()


@pytest.mark.asyncio
async def test_list_and_unknown_sub_command(manager, client, user_dir):
    relay = await start(manager, user_dir)

    await client.deliver(1, ".sudo ls", out=True)
    assert client.last_edit_text() == "No users are authorized"

    relay.store.add(5, "friend")
    await client.deliver(1, ".sudo ls", out=True)
    assert "friend" in client.last_edit_text()

    await client.deliver(1, ".sudo frobnicate", out=True)
    assert "Unknown sub-command" in client.last_edit_text()
    await manager.shutdown()
