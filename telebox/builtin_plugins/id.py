"""id: show sender and chat ids."""

from telebox.bus.events import ChatMessage
from telebox.plugins.base import Plugin


class IdPlugin(Plugin):
    description = "Reply to a message to see its sender id and chat id"

    def __init__(self):
        self.cmd_handlers = {"id": self.show_id}

    async def show_id(self, message: ChatMessage) -> None:
        target = await message.get_reply_message() if message.is_reply else None
        target = target or message
        lines = [f"Chat ID: <code>{target.chat_id}</code>", f"Message ID: <code>{target.id}</code>"]
        if target.sender_id is not None:
            lines.insert(0, f"User ID: <code>{target.sender_id}</code>")
        await message.edit("\n".join(lines), parse_mode="html")


def setup(context):
    return IdPlugin()
