"""Tests for the client event-handler registry and message helpers."""

import pytest

from telebox.bus.events import EventKind


@pytest.mark.asyncio
async def test_emit_runs_matching_handlers_in_order(client):
    calls = []

    async def first(message):
        calls.append(("first", message.text))

    async def second(message):
        calls.append(("second", message.text))

    async def edited(message):
        calls.append(("edited", message.text))

    client.add_event_handler(first, EventKind.NEW_MESSAGE)
    client.add_event_handler(second, EventKind.NEW_MESSAGE)
    client.add_event_handler(edited, EventKind.EDITED_MESSAGE)

    await client.deliver(1, "hi")
    assert calls == [("first", "hi"), ("second", "hi")]


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others(client):
    calls = []

    async def broken(message):
        raise RuntimeError("boom")

    async def healthy(message):
        calls.append(message.text)

    client.add_event_handler(broken, EventKind.NEW_MESSAGE)
    client.add_event_handler(healthy, EventKind.NEW_MESSAGE)

    await client.deliver(1, "still delivered")
    assert calls == ["still delivered"]


def test_remove_event_handler(client):
    async def handler(message):
        pass

    client.add_event_handler(handler, "custom")
    assert client.remove_event_handler(handler, "custom")
    assert not client.remove_event_handler(handler, "custom")


@pytest.mark.asyncio
async def test_message_helpers(client):
    original = client.incoming(1, "question", sender_id=3)
    message = client.incoming(1, ".cmd", out=True, reply_to_msg_id=original.id)

    assert message.is_reply
    assert message.from_owner
    assert (await message.get_reply_message()) is original

    reply = await message.reply("answer")
    assert reply.reply_to_msg_id == message.id

    await message.edit("edited")
    assert message.text == "edited"

    await message.delete_later(0)
    assert client.deleted == [(1, message.id)]


@pytest.mark.asyncio
async def test_unbound_message_raises():
    from telebox.bus.events import ChatMessage

    with pytest.raises(RuntimeError):
        await ChatMessage(id=1, chat_id=1).edit("x")
