"""Shared fixtures: an in-memory chat client and a wired plugin manager."""

import itertools
from pathlib import Path
from typing import Any

import pytest

from telebox.bus.events import ChatMessage, EventKind
from telebox.channels.base import BaseClient, Peer
from telebox.config.schema import RelayConfig, Settings
from telebox.plugins.manager import PluginManager
from telebox.storage.alias import AliasStore

OWNER_ID = 1000


class FakeClient(BaseClient):
    """Records every outgoing call instead of talking to a chat network."""

    name = "fake"

    def __init__(self):
        super().__init__()
        self.messages: dict[tuple[int, int], ChatMessage] = {}
        self.sent: list[ChatMessage] = []
        self.edits: list[tuple[int, int, str, dict[str, Any]]] = []
        self.deleted: list[tuple[int, int]] = []
        self.peers: dict[str, Peer] = {}
        self._ids = itertools.count(1)

    def incoming(self, chat_id: int, text: str, **fields: Any) -> ChatMessage:
        """Create a message as if it had arrived from the network."""
        message = ChatMessage(id=next(self._ids), chat_id=chat_id, text=text, **fields)
        message.client = self
        self.messages[(chat_id, message.id)] = message
        return message

    async def deliver(self, chat_id: int, text: str, edited: bool = False, **fields: Any) -> ChatMessage:
        message = self.incoming(chat_id, text, **fields)
        event = EventKind.EDITED_MESSAGE if edited else EventKind.NEW_MESSAGE
        await self.emit(event, message)
        return message

    async def send_message(self, chat_id, text, *, reply_to=None, entities=None, **kwargs) -> ChatMessage:
        message = self.incoming(
            chat_id, text, sender_id=OWNER_ID, out=True, reply_to_msg_id=reply_to, entities=list(entities or [])
        )
        self.sent.append(message)
        return message

    async def _edit_message(self, chat_id, message_id, text, **kwargs):
        self.edits.append((chat_id, message_id, text, kwargs))
        message = self.messages.get((chat_id, message_id))
        if message is None:
            return None
        message.text = text
        return message

    async def _delete_message(self, chat_id, message_id):
        self.deleted.append((chat_id, message_id))
        self.messages.pop((chat_id, message_id), None)

    async def get_message(self, chat_id, message_id):
        return self.messages.get((chat_id, message_id))

    async def resolve_peer(self, target):
        if str(target) in self.peers:
            return self.peers[str(target)]
        if str(target).lstrip("-").isdigit():
            return Peer(id=int(target), display=f"peer {target}")
        return None

    def last_edit_text(self) -> str | None:
        return self.edits[-1][2] if self.edits else None


PING_PLUGIN = '''
from telebox.plugins.base import Plugin


async def ping(message):
    await message.edit("pong")


class PingPlugin(Plugin):
    description = "Reply with pong"
    cmd_handlers = {"ping": ping}


plugin = PingPlugin()
'''


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("TB_PREFIX", ". !")  # restored after the test, set_prefixes writes it
    monkeypatch.delenv("TB_ENV", raising=False)
    return Settings(
        prefix=". !",
        assets_dir=str(tmp_path / "assets"),
        user_plugin_dir=str(tmp_path / "plugins"),
        relay=RelayConfig(sudo_confirm_delay=0, sure_confirm_delay=0, sure_delete_delay=0, cache_ttl=10),
    )


@pytest.fixture
def user_dir(tmp_path) -> Path:
    path = tmp_path / "plugins"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture
def alias_store(settings):
    return AliasStore(settings.db_path("alias"))


@pytest.fixture
def manager(settings, client, alias_store, user_dir, tmp_path):
    return PluginManager(
        settings,
        client,
        alias_store,
        user_dir=user_dir,
        env_path=tmp_path / ".env",
    )
