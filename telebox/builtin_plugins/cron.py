"""cron: inspect the scheduled jobs plugins declared."""

import html

from telebox.bus.events import ChatMessage
from telebox.plugins.base import Plugin


class CronPlugin(Plugin):
    description = "<code>cron ls</code> - list active scheduled tasks"

    def __init__(self, manager):
        self.manager = manager
        self.cmd_handlers = {"cron": self.cron}

    async def cron(self, message: ChatMessage) -> None:
        jobs = self.manager.scheduler.jobs()
        if not jobs:
            await message.edit("No scheduled tasks")
            return
        lines = []
        for job in sorted(jobs, key=lambda j: j.name):
            line = f"<code>{html.escape(job.name)}</code> <code>{html.escape(job.cron)}</code>"
            if job.description:
                line += f" {html.escape(job.description)}"
            if job.failures:
                line += f" ⚠️ {job.failures}/{job.runs} failed"
            lines.append(line)
        await message.edit("⏰ Scheduled tasks:\n" + "\n".join(lines), parse_mode="html")


def setup(context):
    return CronPlugin(context.manager)
