"""prefix: show or change the command triggers."""

import html

from telebox.bus.events import ChatMessage
from telebox.core.dispatcher import split_command
from telebox.plugins.base import Plugin

USAGE = (
    "<code>prefix</code> - show the current prefixes\n"
    "<code>prefix set . !</code> - replace them\n"
    "<code>prefix add $</code> - add prefixes\n"
    "<code>prefix del $</code> - remove prefixes (one must remain)"
)


def _render(prefixes) -> str:
    return " • ".join(f"<code>{html.escape(p)}</code>" for p in prefixes)


class PrefixPlugin(Plugin):
    description = "Manage command prefixes\n" + USAGE

    def __init__(self, manager):
        self.manager = manager
        self.cmd_handlers = {"prefix": self.prefix}

    async def prefix(self, message: ChatMessage) -> None:
        split = split_command(message.text, self.manager.prefixes)
        args = split[1].split() if split else []
        if not args:
            await message.edit(f"Current prefixes: {_render(self.manager.prefixes)}", parse_mode="html")
            return

        action, values = args[0], args[1:]
        if action not in ("set", "add", "del") or not values:
            await message.edit(USAGE, parse_mode="html")
            return

        current = self.manager.prefixes.as_list()
        if action == "set":
            new = values
        elif action == "add":
            new = [*current, *values]
        else:
            new = [p for p in current if p not in values]
        if not new:
            await message.edit("❌ At least one prefix must remain")
            return

        persisted = self.manager.set_prefixes(new)
        text = f"✅ Prefixes: {_render(self.manager.prefixes)}"
        if not persisted:
            text += "\n⚠️ Could not write .env, the change lasts until restart"
        await message.edit(text, parse_mode="html")
        await self.manager.reload()


def setup(context):
    return PrefixPlugin(context.manager)
