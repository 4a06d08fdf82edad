"""Alias records: alternate command tokens resolving to an original command."""

from __future__ import annotations

from dataclasses import dataclass

from telebox.storage.base import SQLiteStore


@dataclass(frozen=True)
class AliasRecord:
    alias: str
    original: str


class AliasStore(SQLiteStore):
    """
    SQLite-backed alias table.

    The store does not reject redirect chains; callers check
    ``would_chain`` before calling ``set``.
    """

    schema = (
        """
        CREATE TABLE IF NOT EXISTS aliases (
            alias TEXT PRIMARY KEY,
            original TEXT NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_aliases_original ON aliases(original)",
    )

    def set(self, alias: str, original: str) -> None:
        """Create or repoint an alias."""
        self._execute(
            """INSERT INTO aliases (alias, original) VALUES (?, ?)
               ON CONFLICT(alias) DO UPDATE SET original = excluded.original""",
            (alias, original),
        )

    def get(self, alias: str) -> str | None:
        rows = self._fetch("SELECT original FROM aliases WHERE alias = ?", (alias,))
        return rows[0]["original"] if rows else None

    def aliases_for(self, original: str) -> list[str]:
        rows = self._fetch(
            "SELECT alias FROM aliases WHERE original = ? ORDER BY alias ASC", (original,)
        )
        return [row["alias"] for row in rows]

    def delete(self, alias: str) -> bool:
        return self._execute("DELETE FROM aliases WHERE alias = ?", (alias,)) > 0

    def list(self) -> list[AliasRecord]:
        rows = self._fetch("SELECT alias, original FROM aliases ORDER BY alias ASC")
        return [AliasRecord(row["alias"], row["original"]) for row in rows]

    def would_chain(self, alias: str, original: str) -> str | None:
        """Explain why ``alias -> original`` would form a redirect chain, or None."""
        if self.get(original) is not None:
            return f"'{original}' is itself an alias"
        if self.aliases_for(alias):
            return f"'{alias}' is already the original of another alias"
        return None
