"""
Pattern-gated relay.

Semi-trusted principals may only send messages that match a stored
pattern. A pattern is either a literal message body, or ``_command:<prefix>``
which matches the prefix alone or followed by whitespace and arguments. A
pattern's redirect rewrites the text before it is resent as the owner.
"""

from __future__ import annotations

import html
from typing import Iterable

from loguru import logger

from telebox.bus.events import ChatMessage
from telebox.relay.base import AuthSnapshot, DelegatedRelay
from telebox.storage.auth import PatternRecord, SureStore


def match_pattern(patterns: Iterable[PatternRecord], text: str | None) -> tuple[PatternRecord, str] | None:
    """
    Find the first pattern ``text`` satisfies.

    Returns the matched record and the text to relay, or None.
    """
    if not text:
        return None
    for record in patterns:
        if record.is_command:
            prefix = record.command_prefix
            if not prefix or not text.startswith(prefix):
                continue
            rest = text[len(prefix):]
            if rest and not rest[0].isspace():
                continue
            if record.redirect:
                return record, record.redirect + rest
            return record, text
        if record.pattern == text:
            return record, record.redirect or text
    return None


class SureRelay(DelegatedRelay):
    command = "sure"

    def __init__(self, store: SureStore, manager, confirm_delay: float, cache_ttl: float, delete_delay: float):
        super().__init__(store, manager, confirm_delay, cache_ttl)
        self.delete_delay = delete_delay

    def load_snapshot(self) -> AuthSnapshot:
        base = super().load_snapshot()
        return AuthSnapshot(base.principals, base.chats, tuple(self.store.patterns()))

    async def listen(self, message: ChatMessage) -> None:
        if message.forwarded:
            return
        snapshot = self.cache.snapshot()
        if not snapshot.allows(message.sender_id, message.chat_id):
            return
        match = match_pattern(snapshot.patterns, message.text)
        if match is None:
            return
        record, text = match

        dispatcher = self.manager.dispatcher
        command = dispatcher.extract_command(text)
        logger.info(f"sure: {message.sender_id} matched pattern {record.id} in {message.chat_id}")
        sent = await self.resend(message, text)
        if sent is not None and command is not None:
            await dispatcher.invoke(command, sent, trigger=message)
        self.delete_later(message, self.delete_delay)

    # ---- pattern administration ----

    async def handle_extra(self, message: ChatMessage, action: str) -> bool:
        if action != "msg":
            return False
        parts = message.text.strip().split(maxsplit=3)
        sub = parts[2] if len(parts) > 2 else ""

        if sub == "add" and len(parts) > 3:
            await self.add_pattern(message, parts[3])
            return True
        if sub == "del" and len(parts) > 3:
            if not parts[3].isdigit():
                await message.edit("Pass a valid pattern ID")
                return True
            await self.delete_pattern(message, int(parts[3]))
            return True
        if sub == "redirect":
            rest = message.text.strip().split(maxsplit=4)
            if len(rest) < 4 or not rest[3].isdigit():
                await message.edit("Pass a valid pattern ID")
                return True
            await self.redirect_pattern(message, int(rest[3]), rest[4] if len(rest) > 4 else "")
            return True
        if sub in ("ls", "list"):
            await self.list_patterns(message)
            return True
        return False

    async def add_pattern(self, message: ChatMessage, raw: str) -> None:
        self.store.add_pattern(raw)
        logger.info(f"sure: pattern added: {raw}")
        await self.confirm(message, f"Added: <code>{html.escape(raw)}</code>")

    async def delete_pattern(self, message: ChatMessage, pattern_id: int) -> None:
        record = self.store.get_pattern(pattern_id)
        if record is None or not self.store.delete_pattern(pattern_id):
            await message.edit(f"No pattern with ID {pattern_id}")
            return
        logger.info(f"sure: pattern {pattern_id} removed")
        await self.confirm(message, f"Removed: <code>{html.escape(record.pattern)}</code>")

    async def redirect_pattern(self, message: ChatMessage, pattern_id: int, redirect: str) -> None:
        record = self.store.get_pattern(pattern_id)
        if record is None:
            await message.edit(f"No pattern with ID {pattern_id}")
            return
        self.store.set_redirect(pattern_id, redirect)
        if not redirect:
            await self.confirm(message, f"Cleared the redirect of <code>{html.escape(record.pattern)}</code>")
            return
        await self.confirm(
            message,
            f"Added: <code>{html.escape(record.pattern)} -> {html.escape(redirect)}</code>",
        )

    async def list_patterns(self, message: ChatMessage) -> None:
        records = self.store.patterns()
        if not records:
            await message.edit("⚠️ No message patterns set, the relay stays inactive until one is added")
            return
        lines = []
        for r in records:
            line = f"<code>{r.id}</code>: <code>{html.escape(r.pattern)}</code>"
            if r.redirect:
                line += f" -> <code>{html.escape(r.redirect)}</code>"
            lines.append(line)
        await message.edit("Message patterns:\n" + "\n".join(lines), parse_mode="html")
