"""help / h: list commands, or describe the plugin behind one."""

import html

from telebox import __logo__, __version__
from telebox.bus.events import ChatMessage
from telebox.core.dispatcher import split_command
from telebox.plugins.base import Plugin, iter_cron_tasks, resolve_description


class HelpPlugin(Plugin):
    description = "Show the command list, or <code>help &lt;command&gt;</code> for details"

    def __init__(self, manager):
        self.manager = manager
        self.cmd_handlers = {"help": self.show_help, "h": self.show_help}

    async def show_help(self, message: ChatMessage) -> None:
        split = split_command(message.text, self.manager.prefixes)
        args = split[1].split() if split else []
        if not args:
            await message.edit(self.render_overview(), parse_mode="html", link_preview=False)
            return
        await message.edit(await self.render_command(args[0].lower()), parse_mode="html")

    def render_overview(self) -> str:
        registry = self.manager.registry
        main = html.escape(self.manager.prefixes.main)
        commands = " • ".join(f"<code>{html.escape(c)}</code>" for c in registry.listing())
        prefixes = " • ".join(f"<code>{html.escape(p)}</code>" for p in self.manager.prefixes)
        return "\n".join([
            f"{__logo__} <b>telebox v{__version__}</b> | {len(registry.plugins())} plugins",
            "",
            f"📋 <b>Commands:</b> {commands or '-'}",
            "",
            f"❕ <b>Prefixes:</b> {prefixes}",
            f"💡 <code>{main}help [command]</code> for details",
        ])

    async def render_command(self, token: str) -> str:
        entry = self.manager.registry.resolve(token)
        main = html.escape(self.manager.prefixes.main)
        if entry is None:
            return (
                f"❌ Unknown command <code>{html.escape(token)}</code>\n\n"
                f"💡 Use <code>{main}help</code> to list all commands"
            )

        plugin = entry.plugin
        lines = []
        for command in plugin.cmd_handlers:
            aliases = self.manager.alias_store.aliases_for(command)
            line = f"<code>{main}{html.escape(command)}</code>"
            if aliases:
                line += " (" + ", ".join(f"<code>{html.escape(a)}</code>" for a in aliases) + ")"
            lines.append(line)

        text = f"🔧 <b>Commands:</b> {' • '.join(lines)}\n\n📝 <b>Description:</b>\n"
        text += await resolve_description(plugin) or "-"

        tasks = iter_cron_tasks(plugin)
        if tasks:
            text += "\n\n⏰ <b>Cron tasks:</b>\n" + "\n".join(
                f"<code>{html.escape(name)}</code> <code>{html.escape(task.cron)}</code> {html.escape(task.description)}"
                for name, task in tasks
            )
        return text


def setup(context):
    return HelpPlugin(context.manager)
