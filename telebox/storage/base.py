"""Shared SQLite plumbing for the small record stores."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path


class SQLiteStore:
    """Opens a short-lived connection per operation; subclasses create their tables."""

    schema: tuple[str, ...] = ()

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._get_connection() as conn:
            for statement in self.schema:
                conn.execute(statement)
            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> int:
        """Run a write statement and return the number of affected rows."""
        with self._get_connection() as conn:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount

    def _fetch(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._get_connection() as conn:
            return conn.execute(sql, params).fetchall()
