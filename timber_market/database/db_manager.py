"""
SQLite access for the marketplace.

The file holds two tables from schema.sql: kv_store, where each marketplace
collection is one JSON document, and audit_log.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..utils import get_logger

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class DatabaseManager:
    """
    Thin wrapper around one SQLite file.

    Each call opens its own connection; the transaction commits when the
    block finishes and rolls back if it raises.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.schema_path = SCHEMA_PATH
        self.logger = get_logger("db_manager")

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize_database(self) -> None:
        """
        Create the tables from schema.sql if they are missing.

        Raises:
            FileNotFoundError: schema.sql is not installed next to this module
        """
        if not self.schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {self.schema_path}")

        with self.get_connection() as conn:
            conn.executescript(self.schema_path.read_text(encoding="utf-8"))

        self.logger.info(f"Database initialized at: {self.db_path}")

    def execute_query(self, query: str, params: Optional[Tuple] = None) -> List[sqlite3.Row]:
        """Run a SELECT and return all rows."""
        with self.get_connection() as conn:
            return conn.execute(query, params or ()).fetchall()

    def execute_update(self, query: str, params: Optional[Tuple] = None) -> int:
        """Run an INSERT, UPDATE or DELETE and return the affected row count."""
        with self.get_connection() as conn:
            return conn.execute(query, params or ()).rowcount

    def table_exists(self, table_name: str) -> bool:
        rows = self.execute_query(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,)
        )
        return bool(rows)

    def backup(self, backup_path: str) -> None:
        """Copy the whole database to backup_path using SQLite's online backup."""
        Path(backup_path).parent.mkdir(parents=True, exist_ok=True)
        target = sqlite3.connect(backup_path)
        try:
            with self.get_connection() as source:
                source.backup(target)
        finally:
            target.close()

        self.logger.info(f"Database backed up to: {backup_path}")

    # Key/value store

    def get_value(self, key: str) -> Optional[str]:
        """The text stored under key, or None."""
        rows = self.execute_query("SELECT value FROM kv_store WHERE key = ?", (key,))
        return rows[0]["value"] if rows else None

    def set_value(self, key: str, value: str) -> None:
        """Store value under key, overwriting what was there."""
        self.execute_update(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value, datetime.now().isoformat())
        )

    def delete_value(self, key: str) -> bool:
        """Returns True if something was stored under key."""
        return self.execute_update("DELETE FROM kv_store WHERE key = ?", (key,)) > 0

    def list_keys(self) -> List[str]:
        return [row["key"] for row in self.execute_query("SELECT key FROM kv_store ORDER BY key")]


def create_database_manager(db_path: str = "data/timber_market.db") -> DatabaseManager:
    """Factory for DatabaseManager."""
    return DatabaseManager(db_path)
