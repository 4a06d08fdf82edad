"""Authorization records for the delegated-authority relays."""

from __future__ import annotations

from dataclasses import dataclass

from telebox.storage.base import SQLiteStore

COMMAND_PATTERN_MARKER = "_command:"


@dataclass(frozen=True)
class PrincipalRecord:
    uid: int
    display: str


@dataclass(frozen=True)
class ChatRecord:
    id: int
    display: str


@dataclass(frozen=True)
class PatternRecord:
    id: int
    pattern: str
    redirect: str | None = None

    @property
    def is_command(self) -> bool:
        return self.pattern.startswith(COMMAND_PATTERN_MARKER)

    @property
    def command_prefix(self) -> str:
        return self.pattern[len(COMMAND_PATTERN_MARKER):]


class SudoStore(SQLiteStore):
    """Principals allowed to run commands as the owner, and the chat allow-list."""

    schema = (
        """
        CREATE TABLE IF NOT EXISTS users (
            uid INTEGER PRIMARY KEY,
            display TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS chats (
            id INTEGER PRIMARY KEY,
            display TEXT NOT NULL
        )
        """,
    )

    def add(self, uid: int, display: str) -> None:
        self._execute(
            """INSERT INTO users (uid, display) VALUES (?, ?)
               ON CONFLICT(uid) DO UPDATE SET display = excluded.display""",
            (uid, display),
        )

    def delete(self, uid: int) -> bool:
        return self._execute("DELETE FROM users WHERE uid = ?", (uid,)) > 0

    def principals(self) -> list[PrincipalRecord]:
        rows = self._fetch("SELECT uid, display FROM users ORDER BY uid ASC")
        return [PrincipalRecord(row["uid"], row["display"]) for row in rows]

    def add_chat(self, chat_id: int, display: str) -> None:
        self._execute(
            """INSERT INTO chats (id, display) VALUES (?, ?)
               ON CONFLICT(id) DO UPDATE SET display = excluded.display""",
            (chat_id, display),
        )

    def delete_chat(self, chat_id: int) -> bool:
        return self._execute("DELETE FROM chats WHERE id = ?", (chat_id,)) > 0

    def chats(self) -> list[ChatRecord]:
        rows = self._fetch("SELECT id, display FROM chats ORDER BY id ASC")
        return [ChatRecord(row["id"], row["display"]) for row in rows]


class SureStore(SudoStore):
    """Sudo-style records plus the message patterns the sure relay accepts."""

    schema = SudoStore.schema + (
        """
        CREATE TABLE IF NOT EXISTS patterns (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            pattern TEXT NOT NULL UNIQUE,
            redirect TEXT
        )
        """,
    )

    def add_pattern(self, pattern: str, redirect: str | None = None) -> None:
        """Add a pattern, or replace the redirect of an existing one."""
        self._execute(
            """INSERT INTO patterns (pattern, redirect) VALUES (?, ?)
               ON CONFLICT(pattern) DO UPDATE SET redirect = excluded.redirect""",
            (pattern, redirect),
        )

    def get_pattern(self, pattern_id: int) -> PatternRecord | None:
        rows = self._fetch("SELECT id, pattern, redirect FROM patterns WHERE id = ?", (pattern_id,))
        return PatternRecord(rows[0]["id"], rows[0]["pattern"], rows[0]["redirect"]) if rows else None

    def set_redirect(self, pattern_id: int, redirect: str | None) -> bool:
        """Point a pattern at a redirect; an empty redirect clears it."""
        return self._execute(
            "UPDATE patterns SET redirect = ? WHERE id = ?", (redirect or None, pattern_id)
        ) > 0

    def delete_pattern(self, pattern_id: int) -> bool:
        return self._execute("DELETE FROM patterns WHERE id = ?", (pattern_id,)) > 0

    def patterns(self) -> list[PatternRecord]:
        rows = self._fetch("SELECT id, pattern, redirect FROM patterns ORDER BY id ASC")
        return [PatternRecord(row["id"], row["pattern"], row["redirect"]) for row in rows]
