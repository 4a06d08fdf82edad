"""
Shared machinery for the delegated-authority relays.

A relay listens to every inbound message, and when the sender is an
authorized principal in an allowed chat, resends the text as the owner and
runs the resulting command through the dispatcher.
"""

from __future__ import annotations

import asyncio
import html
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from telebox.bus.events import ChatMessage
from telebox.channels.base import BaseClient, Peer
from telebox.relay.cache import RelayCache
from telebox.storage.auth import PatternRecord, SudoStore

if TYPE_CHECKING:
    from telebox.plugins.manager import PluginManager


@dataclass(frozen=True)
class AuthSnapshot:
    principals: frozenset[int]
    chats: frozenset[int]
    patterns: tuple[PatternRecord, ...] = ()

    def allows(self, sender_id: int | None, chat_id: int | None) -> bool:
        """An empty chat allow-list admits every chat."""
        if sender_id is None or chat_id is None:
            return False
        if sender_id not in self.principals:
            return False
        return not self.chats or chat_id in self.chats


def render_peer(peer_id: int, display: str | None, is_user: bool = True) -> str:
    link = f"tg://user?id={peer_id}" if is_user else f"https://t.me/c/{peer_id}"
    label = f"{html.escape(display)} " if display else ""
    return f'{label}<a href="{link}">{peer_id}</a>'


class DelegatedRelay:
    """
    Base relay: authorization gate, cache and the principal/chat admin commands.

    Subclasses implement ``listen`` and may extend ``handle_extra`` with their
    own sub-commands.
    """

    command = "relay"

    def __init__(self, store: SudoStore, manager: PluginManager, confirm_delay: float, cache_ttl: float):
        self.store = store
        self.manager = manager
        self.confirm_delay = confirm_delay
        self.cache: RelayCache[AuthSnapshot] = RelayCache(self.load_snapshot, cache_ttl)
        self._pending: set[asyncio.Task] = set()

    @property
    def client(self) -> BaseClient | None:
        return self.manager.client

    def load_snapshot(self) -> AuthSnapshot:
        return AuthSnapshot(
            principals=frozenset(p.uid for p in self.store.principals()),
            chats=frozenset(c.id for c in self.store.chats()),
        )

    def authorized(self, message: ChatMessage) -> bool:
        return self.cache.snapshot().allows(message.sender_id, message.chat_id)

    async def listen(self, message: ChatMessage) -> None:
        raise NotImplementedError

    async def resend(self, message: ChatMessage, text: str) -> ChatMessage | None:
        """Send ``text`` as the owner into the chat ``message`` came from."""
        client = self.client
        if client is None:
            logger.warning(f"{self.command}: no client attached, cannot relay")
            return None
        entities = message.entities if text == message.text else None
        return await client.send_message(
            message.chat_id,
            text,
            reply_to=message.reply_to_msg_id,
            entities=entities or None,
        )

    # ---- administration ----

    async def handle_admin(self, message: ChatMessage) -> None:
        parts = message.text.strip().split()
        action = parts[1] if len(parts) > 1 else ""
        target = parts[2] if len(parts) > 2 else None

        if action == "chat":
            sub = parts[2] if len(parts) > 2 else ""
            chat_target = parts[3] if len(parts) > 3 else None
            if sub in ("add", "del"):
                await self.change_chat(message, chat_target, sub)
                return
            if sub in ("ls", "list"):
                await self.list_chats(message)
                return
        elif action in ("add", "del"):
            await self.change_principal(message, target, action)
            return
        elif action in ("ls", "list"):
            await self.list_principals(message)
            return
        elif await self.handle_extra(message, action):
            return

        prefix = self.manager.prefixes.main
        await message.edit(
            f"Unknown sub-command, see <code>{html.escape(prefix)}help {self.command}</code>",
            parse_mode="html",
        )

    async def handle_extra(self, message: ChatMessage, action: str) -> bool:
        """Hook for subclass sub-commands. Returns True if ``action`` was handled."""
        return False

    async def confirm(self, message: ChatMessage, text: str) -> None:
        self.cache.invalidate()
        await message.edit(text, parse_mode="html")
        self.delete_later(message, self.confirm_delay)

    def delete_later(self, message: ChatMessage, delay: float) -> asyncio.Task:
        """Delete ``message`` after ``delay`` seconds without holding up the caller."""
        task = asyncio.get_running_loop().create_task(self._delete_after(message, delay))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _delete_after(self, message: ChatMessage, delay: float) -> None:
        try:
            await message.delete_later(delay)
        except Exception as e:
            logger.warning(f"{self.command}: could not delete message {message.id} in {message.chat_id}: {e}")

    async def drain(self) -> None:
        """Wait for every scheduled delete to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def _resolve(self, message: ChatMessage, target: str) -> Peer | None:
        client = self.client
        if client is None:
            return None
        try:
            return await client.resolve_peer(target)
        except Exception as e:
            logger.debug(f"{self.command}: could not resolve {target}: {e}")
            return None

    async def change_principal(self, message: ChatMessage, target: str | None, action: str) -> None:
        if target:
            peer = await self._resolve(message, target)
            if peer is None:
                await message.edit("Could not resolve that user")
                return
            uid, display = peer.id, render_peer(peer.id, peer.display, peer.is_user)
        else:
            reply = await message.get_reply_message() if message.is_reply else None
            if reply is None:
                await message.edit("Reply to the user's message or pass a uid/@username")
                return
            if reply.sender_id is None:
                await message.edit("Could not read the sender of that message")
                return
            uid = reply.sender_id
            peer = await self._resolve(message, str(uid))
            display = render_peer(uid, peer.display if peer else None)

        if action == "add":
            self.store.add(uid, display)
        else:
            self.store.delete(uid)
        logger.info(f"{self.command}: principal {uid} {'added' if action == 'add' else 'removed'}")
        await self.confirm(message, f"{'Added' if action == 'add' else 'Removed'}: {display}")

    async def list_principals(self, message: ChatMessage) -> None:
        records = self.store.principals()
        if not records:
            await message.edit("No users are authorized")
            return
        lines = "\n".join(f"- {r.display}" for r in records)
        await message.edit(f"Authorized users:\n{lines}", parse_mode="html")

    async def change_chat(self, message: ChatMessage, target: str | None, action: str) -> None:
        if target:
            peer = await self._resolve(message, target)
            if peer is None:
                await message.edit("Could not resolve that chat")
                return
            chat_id, display = peer.id, render_peer(peer.id, peer.display, peer.is_user)
        else:
            chat_id = message.chat_id
            peer = await self._resolve(message, str(chat_id))
            display = render_peer(chat_id, peer.display if peer else None, peer.is_user if peer else False)

        if action == "add":
            self.store.add_chat(chat_id, display)
        else:
            self.store.delete_chat(chat_id)
        logger.info(f"{self.command}: chat {chat_id} {'added' if action == 'add' else 'removed'}")
        await self.confirm(message, f"{'Added' if action == 'add' else 'Removed'}: {display}")

    async def list_chats(self, message: ChatMessage) -> None:
        records = self.store.chats()
        if not records:
            await message.edit("⚠️ No chat allow-list set, usable in every chat")
            return
        lines = "\n".join(f"- {r.display}" for r in records)
        await message.edit(f"Allowed chats:\n{lines}", parse_mode="html")
