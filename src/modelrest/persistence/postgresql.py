"""PostgreSQL executor.

Uses psycopg v3 (psycopg[binary]>=3.1.0) for database access. Statements
are rendered with the PostgreSQL dialect, so identifiers arrive
double-quoted; ``?`` placeholders are translated to ``%s`` before
execution and rows are read through the dict_row factory.
"""

from __future__ import annotations

import logging
from typing import Any

from modelrest.core.types import get_storage_type
from modelrest.metadata.loader import Schema
from modelrest.query.builder import Statement
from modelrest.query.quoting import POSTGRESQL, quote, to_paramstyle

logger = logging.getLogger(__name__)


class PostgreSQLAdapter:
    """Runs rendered statements against PostgreSQL using psycopg v3."""

    dialect = POSTGRESQL

    def __init__(self, url: str):
        # psycopg.connect() wants a plain libpq DSN or postgres:// URL
        self.url = url.replace("postgresql+psycopg://", "postgresql://")
        self.conn: Any = None

    def connect(self) -> None:
        """Establish database connection."""
        import psycopg
        from psycopg.rows import dict_row

        self.conn = psycopg.connect(self.url, row_factory=dict_row)
        self.conn.autocommit = True

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _connection(self) -> Any:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def initialize_entity(self, schema: Schema) -> None:
        """Create the schema's table if it doesn't exist."""
        conn = self._connection()

        columns = []
        for field in schema.fields:
            pg_type = _sqlite_to_pg_type(get_storage_type(field.type))
            col_def = f"{quote(field.db_name, self.dialect)} {pg_type}"
            if field.primary_key and len(schema.primary_fields) == 1:
                col_def += " PRIMARY KEY"
            columns.append(col_def)
        if len(schema.primary_fields) > 1:
            keys = ", ".join(quote(f.db_name, self.dialect) for f in schema.primary_fields)
            columns.append(f"PRIMARY KEY ({keys})")

        sql = f"CREATE TABLE IF NOT EXISTS {quote(schema.table, self.dialect)} ({', '.join(columns)})"
        conn.execute(sql)

    def insert(self, schema: Schema, data: dict[str, Any]) -> None:
        """Insert one row; keys of ``data`` are column names."""
        conn = self._connection()

        columns = [f.db_name for f in schema.fields if f.db_name in data]
        quoted = ", ".join(quote(c, self.dialect) for c in columns)
        placeholders = ", ".join("%s" for _ in columns)
        sql = f"INSERT INTO {quote(schema.table, self.dialect)} ({quoted}) VALUES ({placeholders})"

        conn.execute(sql, [data[c] for c in columns])

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]:
        """Run a data statement and return its rows as dicts."""
        conn = self._connection()
        sql = to_paramstyle(statement.sql, self.dialect)
        logger.debug("SQL: %s %r", sql, statement.params)
        cursor = conn.execute(sql, statement.params)
        return [dict(row) for row in cursor.fetchall()]

    def fetch_count(self, statement: Statement) -> int:
        """Run a count statement and return its single value."""
        conn = self._connection()
        sql = to_paramstyle(statement.sql, self.dialect)
        logger.debug("SQL: %s %r", sql, statement.params)
        row = conn.execute(sql, statement.params).fetchone()
        if not row:
            return 0
        return int(next(iter(row.values())))


def _sqlite_to_pg_type(sqlite_type: str) -> str:
    """Map SQLite column types to PostgreSQL equivalents."""
    mapping = {
        "TEXT": "TEXT",
        "INTEGER": "INTEGER",
        "REAL": "DOUBLE PRECISION",
        "NUMERIC": "NUMERIC",
        "BLOB": "BYTEA",
    }
    return mapping.get(sqlite_type.upper(), "TEXT")
