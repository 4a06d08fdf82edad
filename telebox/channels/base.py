"""Base chat-client interface consumed by the dispatch layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from loguru import logger

from telebox.bus.events import ChatMessage

EventHandler = Callable[[ChatMessage], Awaitable[Any]]


@dataclass
class Peer:
    """A user or chat resolved by the client."""

    id: int
    display: str
    is_user: bool = True


class BaseClient(ABC):
    """
    Abstract base class for chat-protocol clients.

    A concrete client owns the connection and turns protocol updates into
    ``ChatMessage`` objects, handing them to ``emit()``. Messages the client
    sends itself through ``send_message`` must not be re-emitted as inbound
    events; the relays invoke the dispatcher on them directly.
    """

    name: str = "base"

    def __init__(self) -> None:
        self._handlers: list[tuple[EventHandler, str]] = []

    @abstractmethod
    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        reply_to: int | None = None,
        entities: list[Any] | None = None,
        **kwargs: Any,
    ) -> ChatMessage:
        """Send a new message as the account owner."""

    @abstractmethod
    async def _edit_message(self, chat_id: int, message_id: int, text: str, **kwargs: Any) -> ChatMessage | None:
        """Protocol-level edit."""

    @abstractmethod
    async def _delete_message(self, chat_id: int, message_id: int) -> None:
        """Protocol-level delete."""

    @abstractmethod
    async def get_message(self, chat_id: int, message_id: int) -> ChatMessage | None:
        """Fetch a single message."""

    @abstractmethod
    async def resolve_peer(self, target: str | int) -> Peer | None:
        """Resolve a user id, chat id or @username."""

    async def edit_message(self, chat_id: int, message_id: int, text: str, **kwargs: Any) -> ChatMessage | None:
        return await self._edit_message(chat_id, message_id, text, **kwargs)

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        await self._delete_message(chat_id, message_id)

    # ---- event handler registry ----

    def add_event_handler(self, handler: EventHandler, event: str) -> None:
        self._handlers.append((handler, str(event)))

    def remove_event_handler(self, handler: EventHandler, event: str) -> bool:
        """Detach a handler. Returns True if it was attached."""
        key = (handler, str(event))
        if key in self._handlers:
            self._handlers.remove(key)
            return True
        return False

    def list_event_handlers(self) -> list[tuple[EventHandler, str]]:
        return list(self._handlers)

    async def emit(self, event: str, message: ChatMessage) -> None:
        """
        Deliver an inbound event to every handler attached for it.

        Handlers run in attachment order; a failing handler is logged and the
        remaining handlers still run.
        """
        if message.client is None:
            message.client = self
        for handler, handler_event in list(self._handlers):
            if handler_event != str(event):
                continue
            try:
                await handler(message)
            except Exception as e:
                logger.error(f"{self.name}: handler {getattr(handler, '__name__', handler)} failed on {event}: {e}")
