"""Command registry: command token -> owning plugin."""

from dataclasses import dataclass

from telebox.plugins.base import CommandHandler, Plugin


@dataclass(frozen=True)
class RegistryEntry:
    """One registered token. ``original`` is set only for alias tokens."""
    plugin: Plugin
    original: str | None = None

    def handler_key(self, token: str) -> str:
        return self.original or token

    def handler_for(self, token: str) -> CommandHandler | None:
        return self.plugin.cmd_handlers.get(self.handler_key(token))


class CommandRegistry:
    """Flat token lookup table, rebuilt from scratch on every load pass."""

    def __init__(self):
        self._entries: dict[str, RegistryEntry] = {}

    def register(self, token: str, entry: RegistryEntry) -> bool:
        """Register a token. Returns False if it is already taken; first writer wins."""
        if token in self._entries:
            return False
        self._entries[token] = entry
        return True

    def resolve(self, token: str) -> RegistryEntry | None:
        return self._entries.get(token)

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def tokens(self) -> list[str]:
        return sorted(self._entries)

    def plugins(self) -> list[Plugin]:
        """Distinct plugins in registration order."""
        seen: dict[int, Plugin] = {}
        for entry in self._entries.values():
            seen.setdefault(id(entry.plugin), entry.plugin)
        return list(seen.values())

    def listing(self) -> list[str]:
        """Alphabetical, de-duplicated view; alias tokens render as ``alias(original)``."""
        rendered = {
            f"{token}({entry.original})" if entry.original else token
            for token, entry in self._entries.items()
        }
        return sorted(rendered)

    def snapshot(self) -> dict[str, str | None]:
        """Token -> original mapping, for comparing two load passes."""
        return {token: entry.original for token, entry in sorted(self._entries.items())}
