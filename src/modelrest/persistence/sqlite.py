"""SQLite executor."""

import logging
import sqlite3
from pathlib import Path
from typing import Any

from modelrest.core.types import get_storage_type
from modelrest.metadata.loader import Schema
from modelrest.query.builder import Statement
from modelrest.query.quoting import SQLITE, quote

logger = logging.getLogger(__name__)


class SQLiteAdapter:
    """Runs rendered statements against a SQLite database."""

    dialect = SQLITE

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Establish database connection."""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _connection(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def initialize_entity(self, schema: Schema) -> None:
        """Create the schema's table if it doesn't exist."""
        conn = self._connection()

        columns = []
        for field in schema.fields:
            col_def = f"{quote(field.db_name, self.dialect)} {get_storage_type(field.type)}"
            if field.primary_key and len(schema.primary_fields) == 1:
                col_def += " PRIMARY KEY"
            columns.append(col_def)
        if len(schema.primary_fields) > 1:
            keys = ", ".join(quote(f.db_name, self.dialect) for f in schema.primary_fields)
            columns.append(f"PRIMARY KEY ({keys})")

        sql = f"CREATE TABLE IF NOT EXISTS {quote(schema.table, self.dialect)} ({', '.join(columns)})"
        conn.execute(sql)
        conn.commit()

    def insert(self, schema: Schema, data: dict[str, Any]) -> None:
        """Insert one row; keys of ``data`` are column names."""
        conn = self._connection()

        columns = [f.db_name for f in schema.fields if f.db_name in data]
        quoted = ", ".join(quote(c, self.dialect) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {quote(schema.table, self.dialect)} ({quoted}) VALUES ({placeholders})"

        conn.execute(sql, [data[c] for c in columns])
        conn.commit()

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]:
        """Run a data statement and return its rows as dicts."""
        conn = self._connection()
        logger.debug("SQL: %s %r", statement.sql, statement.params)
        cursor = conn.execute(statement.sql, statement.params)
        return [dict(row) for row in cursor.fetchall()]

    def fetch_count(self, statement: Statement) -> int:
        """Run a count statement and return its single value."""
        conn = self._connection()
        logger.debug("SQL: %s %r", statement.sql, statement.params)
        row = conn.execute(statement.sql, statement.params).fetchone()
        return int(row[0]) if row else 0
