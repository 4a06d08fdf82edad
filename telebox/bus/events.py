"""Event types exchanged between the chat client and the dispatch layer."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from telebox.channels.base import BaseClient


class EventKind(StrEnum):
    """Event classes every client must deliver."""

    NEW_MESSAGE = "new_message"
    EDITED_MESSAGE = "edited_message"


@dataclass
class ChatMessage:
    """A message as seen by telebox, bound to the client that produced it."""

    id: int
    chat_id: int
    text: str = ""
    sender_id: int | None = None
    out: bool = False  # Sent by the account owner
    is_self_chat: bool = False  # Lives in the owner's saved-messages chat
    reply_to_msg_id: int | None = None
    forwarded: bool = False
    entities: list[Any] = field(default_factory=list)
    date: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)  # Client-specific data
    client: BaseClient | None = field(default=None, repr=False, compare=False)

    @property
    def is_reply(self) -> bool:
        return self.reply_to_msg_id is not None

    @property
    def from_owner(self) -> bool:
        """True when the owner authored the message or it sits in the self-chat."""
        return self.out or self.is_self_chat

    def bind(self, client: BaseClient) -> ChatMessage:
        """Return a copy of this message whose outgoing calls go through ``client``."""
        return replace(self, client=client)

    def _require_client(self) -> BaseClient:
        if self.client is None:
            raise RuntimeError(f"Message {self.chat_id}/{self.id} is not bound to a client")
        return self.client

    async def edit(self, text: str, **kwargs: Any) -> ChatMessage | None:
        """Edit this message in place."""
        edited = await self._require_client().edit_message(self.chat_id, self.id, text, **kwargs)
        if edited is None:
            return None
        self.text = edited.text
        return edited

    async def delete(self) -> None:
        await self._require_client().delete_message(self.chat_id, self.id)

    async def delete_later(self, delay: float) -> None:
        """Sleep for ``delay`` seconds, then delete the message."""
        await asyncio.sleep(delay)
        await self.delete()

    async def reply(self, text: str, **kwargs: Any) -> ChatMessage:
        return await self._require_client().send_message(
            self.chat_id, text, reply_to=self.id, **kwargs
        )

    async def get_reply_message(self) -> ChatMessage | None:
        if self.reply_to_msg_id is None:
            return None
        return await self._require_client().get_message(self.chat_id, self.reply_to_msg_id)
