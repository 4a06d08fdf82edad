"""reload: rebuild the command registry from the plugin directories."""

import html

from telebox.bus.events import ChatMessage
from telebox.errors import ReloadError
from telebox.plugins.base import Plugin


class ReloadPlugin(Plugin):
    description = "Reload every plugin"

    def __init__(self, manager):
        self.manager = manager
        self.cmd_handlers = {"reload": self.reload}

    async def reload(self, message: ChatMessage) -> None:
        await message.edit("🔄 Reloading plugins...")
        try:
            report = await self.manager.reload()
        except ReloadError as e:
            await message.edit(f"❌ Reload failed, previous plugins kept: {html.escape(str(e))}", parse_mode="html")
            return

        text = f"✅ Reloaded: {report.summary()}"
        if report.rejected:
            names = ", ".join(html.escape(path.rsplit("/", 1)[-1]) for path in report.rejected)
            text += f"\n⚠️ Rejected: {names}"
        await message.edit(text, parse_mode="html")


def setup(context):
    return ReloadPlugin(context.manager)
