"""sudo: let trusted users run commands as the owner."""

from telebox.plugins.base import Plugin
from telebox.relay.sudo import SudoRelay
from telebox.storage.auth import SudoStore


class SudoPlugin(Plugin):
    description = (
        "Let other users run commands as you\n"
        "<code>sudo add [uid/@username]</code> - authorize a user (or reply to them)\n"
        "<code>sudo del [uid/@username]</code> - revoke a user\n"
        "<code>sudo ls</code> - list users\n\n"
        "⚠️ Without a chat allow-list every chat is allowed\n"
        "<code>sudo chat add [id/@name]</code> - allow a chat (default: this one)\n"
        "<code>sudo chat del [id/@name]</code> - disallow a chat\n"
        "<code>sudo chat ls</code> - list allowed chats"
    )

    def __init__(self, relay: SudoRelay):
        self.relay = relay
        self.cmd_handlers = {"sudo": relay.handle_admin}
        self.listen_message_handler = relay.listen


def setup(context):
    settings = context.settings
    store = SudoStore(settings.db_path("sudo"))
    relay = SudoRelay(
        store,
        context.manager,
        confirm_delay=settings.relay.sudo_confirm_delay,
        cache_ttl=settings.relay.cache_ttl,
    )
    return SudoPlugin(relay)
