"""sure: let semi-trusted users send pre-approved messages as the owner."""

from telebox.plugins.base import Plugin
from telebox.relay.sure import SureRelay
from telebox.storage.auth import SureStore


class SurePlugin(Plugin):
    description = (
        "Let other users send approved messages as you, optionally rewritten\n"
        "<code>sure add [uid/@username]</code> - authorize a user (or reply to them)\n"
        "<code>sure del [uid/@username]</code> - revoke a user\n"
        "<code>sure ls</code> - list users\n\n"
        "⚠️ Without a chat allow-list every chat is allowed\n"
        "<code>sure chat add [id/@name]</code> - allow a chat (default: this one)\n"
        "<code>sure chat del [id/@name]</code> - disallow a chat\n"
        "<code>sure chat ls</code> - list allowed chats\n\n"
        "⚠️ Nothing is relayed until a message pattern is set\n"
        "<code>sure msg add &lt;text&gt;</code> - allow a message (raw text, spaces kept)\n"
        "A pattern starting with <code>_command:</code> matches a command with or without "
        "arguments: <code>_command:/sb</code> matches <code>/sb</code> and <code>/sb uid</code>; "
        "redirected to <code>/spam</code> they become <code>/spam</code> and <code>/spam uid</code>\n"
        "<code>sure msg redirect &lt;id&gt; [text]</code> - set a redirect (empty clears it)\n"
        "<code>sure msg del &lt;id&gt;</code> - remove a pattern\n"
        "<code>sure msg ls</code> - list patterns"
    )
    ignore_edited = False

    def __init__(self, relay: SureRelay):
        self.relay = relay
        self.cmd_handlers = {"sure": relay.handle_admin}
        self.listen_message_handler = relay.listen


def setup(context):
    settings = context.settings
    store = SureStore(settings.db_path("sure"))
    relay = SureRelay(
        store,
        context.manager,
        confirm_delay=settings.relay.sure_confirm_delay,
        cache_ttl=settings.relay.cache_ttl,
        delete_delay=settings.relay.sure_delete_delay,
    )
    return SurePlugin(relay)
