"""Chat-protocol client interface."""

from telebox.channels.base import BaseClient, EventHandler, Peer

__all__ = ["BaseClient", "EventHandler", "Peer"]
