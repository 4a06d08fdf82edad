"""
Command dispatcher for telebox.

Turns owner-authored messages of the form ``<prefix><command> args`` into
calls to the plugin handler registered for that command.
"""

from __future__ import annotations

import html
import inspect
import re
from typing import Callable

from loguru import logger

from telebox.bus.events import ChatMessage
from telebox.channels.base import BaseClient
from telebox.core.prefixes import PrefixSet
from telebox.plugins.hooks import HookEvent, HookManager
from telebox.plugins.registry import CommandRegistry, RegistryEntry

IDENTIFIER = re.compile(r"^\w+$")
MAX_ERROR_LENGTH = 200


def accepts_trigger(handler: Callable) -> bool:
    """True if the handler takes a second positional argument for the trigger message."""
    try:
        params = list(inspect.signature(handler).parameters.values())
    except (TypeError, ValueError):
        return False
    positional = [
        p for p in params
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL)
    ]
    return len(positional) >= 2 or any(p.kind == p.VAR_POSITIONAL for p in positional)


def split_command(text: str, prefixes: PrefixSet) -> tuple[str, str] | None:
    """
    Split ``text`` into (candidate, args) after the first matching prefix.

    Returns None when no prefix matches or nothing follows it.
    """
    prefix = prefixes.match(text)
    if prefix is None:
        return None
    rest = text[len(prefix):].strip()
    if not rest:
        return None
    parts = rest.split(maxsplit=1)
    return parts[0], parts[1] if len(parts) > 1 else ""


class Dispatcher:
    """
    Routes inbound owner messages to command handlers.

    ``registry`` is replaced wholesale by the plugin manager on every reload;
    a dispatch always reads the registry that is current when it starts.
    """

    def __init__(
        self,
        prefixes: PrefixSet,
        alias_lookup: Callable[[str], str | None],
        hooks: HookManager,
        outgoing: BaseClient | None = None,
        ignore_edited: bool = False,
    ):
        self.prefixes = prefixes
        self.alias_lookup = alias_lookup
        self.hooks = hooks
        self.outgoing = outgoing  # Client every handler's message is bound to
        self.ignore_edited = ignore_edited
        self.registry = CommandRegistry()

    def extract_command(self, text: str | None) -> str | None:
        """
        Return the registered command token ``text`` invokes, or None.

        Bare identifiers are used as-is; anything else counts only if the
        alias store knows it literally.
        """
        if not text:
            return None
        split = split_command(text, self.prefixes)
        if split is None:
            return None
        candidate, _ = split
        if not IDENTIFIER.match(candidate) and self.alias_lookup(candidate) is None:
            return None
        if candidate not in self.registry:
            return None
        return candidate

    def is_edit_ignored(self, entry: RegistryEntry) -> bool:
        policy = entry.plugin.ignore_edited
        return self.ignore_edited if policy is None else policy

    async def on_new_message(self, message: ChatMessage) -> None:
        await self.dispatch(message, edited=False)

    async def on_edited_message(self, message: ChatMessage) -> None:
        await self.dispatch(message, edited=True)

    async def dispatch(self, message: ChatMessage, edited: bool = False) -> bool:
        """Handle one inbound event. Only owner-authored messages are considered."""
        if not message.from_owner:
            return False
        command = self.extract_command(message.text)
        if command is None:
            return False
        return await self.invoke(command, message, edited=edited)

    async def invoke(
        self,
        command: str,
        message: ChatMessage,
        trigger: ChatMessage | None = None,
        edited: bool = False,
    ) -> bool:
        """
        Run the handler registered for ``command`` on ``message``.

        ``trigger`` is the inbound message that made a relay act, if any.
        Handler failures are reported by editing ``message`` and never raised.
        Returns True if a handler ran to completion.
        """
        registry = self.registry
        entry = registry.resolve(command)
        if entry is None:
            return False
        if edited and self.is_edit_ignored(entry):
            logger.debug(f"Edited message ignored for '{command}'")
            return False
        handler = entry.handler_for(command)
        if handler is None:
            return False

        if self.outgoing is not None:
            message = message.bind(self.outgoing)
        await self.hooks.emit(HookEvent.ON_COMMAND, command=command, message=message, trigger=trigger)
        try:
            if trigger is not None and accepts_trigger(handler):
                await handler(message, trigger)
            else:
                await handler(message)
        except Exception as e:
            logger.exception(f"Command '{command}' failed")
            await self.hooks.emit(HookEvent.ON_COMMAND_ERROR, command=command, message=message, error=e)
            await self._report_failure(command, message, e)
            return False
        return True

    async def _report_failure(self, command: str, message: ChatMessage, error: Exception) -> None:
        detail = str(error) or type(error).__name__
        if len(detail) > MAX_ERROR_LENGTH:
            detail = detail[:MAX_ERROR_LENGTH] + "..."
        text = f"❌ Command <code>{html.escape(command)}</code> failed: {html.escape(detail)}"
        try:
            await message.edit(text, parse_mode="html")
        except Exception as e:
            logger.error(f"Could not report failure of '{command}': {e}")
