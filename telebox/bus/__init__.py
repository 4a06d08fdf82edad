"""Message and event types shared by clients, the dispatcher and plugins."""

from telebox.bus.events import ChatMessage, EventKind

__all__ = ["ChatMessage", "EventKind"]
