"""Outgoing edit/delete middleware applied by the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from telebox.bus.events import ChatMessage
from telebox.channels.base import BaseClient, Peer
from telebox.plugins.hooks import HookEvent, HookManager

MAX_MESSAGE_LENGTH = 4096


@dataclass
class EditRequest:
    chat_id: int
    message_id: int
    text: str
    kwargs: dict[str, Any] = field(default_factory=dict)
    cancel: bool = False


@dataclass
class DeleteRequest:
    chat_id: int
    message_id: int
    cancel: bool = False


async def truncate_edit(data: EditRequest) -> EditRequest:
    """Keep edited text within the protocol limit."""
    if len(data.text) > MAX_MESSAGE_LENGTH:
        data.text = data.text[: MAX_MESSAGE_LENGTH - 3] + "..."
    return data


def install_default_middleware(hooks: HookManager) -> None:
    hooks.on(HookEvent.PRE_EDIT, truncate_edit)


class HookedClient(BaseClient):
    """
    Wraps a client so every edit and delete runs through the hook chain.

    Everything else, including the event-handler registry, is delegated to
    the wrapped client unchanged.
    """

    def __init__(self, inner: BaseClient, hooks: HookManager):
        self.inner = inner
        self.hooks = hooks
        self.name = f"hooked:{inner.name}"

    async def send_message(self, chat_id: int, text: str, **kwargs: Any) -> ChatMessage:
        sent = await self.inner.send_message(chat_id, text, **kwargs)
        return sent.bind(self)

    async def edit_message(self, chat_id: int, message_id: int, text: str, **kwargs: Any) -> ChatMessage | None:
        request = await self.hooks.emit_chain(
            HookEvent.PRE_EDIT, EditRequest(chat_id, message_id, text, dict(kwargs))
        )
        if request.cancel:
            logger.debug(f"Edit of {chat_id}/{message_id} cancelled by middleware")
            return None
        return await self.inner.edit_message(request.chat_id, request.message_id, request.text, **request.kwargs)

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        request = await self.hooks.emit_chain(HookEvent.PRE_DELETE, DeleteRequest(chat_id, message_id))
        if request.cancel:
            logger.debug(f"Delete of {chat_id}/{message_id} cancelled by middleware")
            return
        await self.inner.delete_message(request.chat_id, request.message_id)

    async def _edit_message(self, chat_id: int, message_id: int, text: str, **kwargs: Any) -> ChatMessage | None:
        return await self.edit_message(chat_id, message_id, text, **kwargs)

    async def _delete_message(self, chat_id: int, message_id: int) -> None:
        await self.delete_message(chat_id, message_id)

    async def get_message(self, chat_id: int, message_id: int) -> ChatMessage | None:
        message = await self.inner.get_message(chat_id, message_id)
        return message.bind(self) if message else None

    async def resolve_peer(self, target: str | int) -> Peer | None:
        return await self.inner.resolve_peer(target)

    def add_event_handler(self, handler, event: str) -> None:
        self.inner.add_event_handler(handler, event)

    def remove_event_handler(self, handler, event: str) -> bool:
        return self.inner.remove_event_handler(handler, event)

    def list_event_handlers(self):
        return self.inner.list_event_handlers()

    async def emit(self, event: str, message: ChatMessage) -> None:
        await self.inner.emit(event, message)
