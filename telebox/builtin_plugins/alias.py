"""alias: alternate tokens for existing commands."""

import html

from telebox.bus.events import ChatMessage
from telebox.core.dispatcher import split_command
from telebox.plugins.base import Plugin

USAGE = (
    "<code>alias set &lt;alias&gt; &lt;command&gt;</code> - add or repoint an alias\n"
    "<code>alias del &lt;alias&gt;</code> - remove an alias\n"
    "<code>alias ls</code> - list aliases"
)


class AliasPlugin(Plugin):
    description = "Manage command aliases\n" + USAGE

    def __init__(self, manager, store):
        self.manager = manager
        self.store = store
        self.cmd_handlers = {"alias": self.alias}

    async def alias(self, message: ChatMessage) -> None:
        split = split_command(message.text, self.manager.prefixes)
        args = split[1].split() if split else []
        action = args[0] if args else ""

        if action in ("ls", "list"):
            await self.list_aliases(message)
        elif action == "set" and len(args) == 3:
            await self.set_alias(message, args[1], args[2])
        elif action == "del" and len(args) == 2:
            await self.delete_alias(message, args[1])
        else:
            await message.edit(USAGE, parse_mode="html")

    async def list_aliases(self, message: ChatMessage) -> None:
        records = self.store.list()
        if not records:
            await message.edit("No aliases set")
            return
        lines = "\n".join(
            f"<code>{html.escape(r.alias)}</code> → <code>{html.escape(r.original)}</code>" for r in records
        )
        await message.edit(f"Aliases:\n{lines}", parse_mode="html")

    async def set_alias(self, message: ChatMessage, alias: str, original: str) -> None:
        registry = self.manager.registry
        entry = registry.resolve(original)
        if entry is None or entry.original is not None:
            await message.edit(f"❌ <code>{html.escape(original)}</code> is not a command", parse_mode="html")
            return
        existing = registry.resolve(alias)
        if existing is not None and existing.original is None:
            await message.edit(f"❌ <code>{html.escape(alias)}</code> is already a command", parse_mode="html")
            return
        reason = self.store.would_chain(alias, original)
        if reason:
            await message.edit(f"❌ Alias chains are not allowed: {html.escape(reason)}", parse_mode="html")
            return

        self.store.set(alias, original)
        await self.manager.reload()
        await message.edit(
            f"✅ <code>{html.escape(alias)}</code> → <code>{html.escape(original)}</code>", parse_mode="html"
        )

    async def delete_alias(self, message: ChatMessage, alias: str) -> None:
        if not self.store.delete(alias):
            await message.edit(f"❌ No alias <code>{html.escape(alias)}</code>", parse_mode="html")
            return
        await self.manager.reload()
        await message.edit(f"✅ Removed alias <code>{html.escape(alias)}</code>", parse_mode="html")


def setup(context):
    return AliasPlugin(context.manager, context.alias_store)
