"""Unconditional relay: trusted principals run any command as the owner."""

from loguru import logger

from telebox.bus.events import ChatMessage
from telebox.relay.base import DelegatedRelay


class SudoRelay(DelegatedRelay):
    command = "sudo"

    async def listen(self, message: ChatMessage) -> None:
        if not self.authorized(message):
            return
        dispatcher = self.manager.dispatcher
        command = dispatcher.extract_command(message.text)
        if command is None:
            return

        logger.info(f"sudo: {message.sender_id} runs '{command}' in {message.chat_id}")
        sent = await self.resend(message, message.text)
        if sent is not None:
            await dispatcher.invoke(command, sent, trigger=message)
