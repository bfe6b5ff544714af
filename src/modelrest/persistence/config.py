"""Database configuration and adapter factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modelrest.persistence.adapter import Executor


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var
        2. MODELREST_DB_PATH env var (converted to a sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/modelrest.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("MODELREST_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'modelrest.db'}")

        return cls(url="sqlite:///modelrest.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith(("postgresql", "postgres://"))

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of a sqlite:/// URL; ":memory:" when empty."""
        return self.url.replace("sqlite:///", "", 1) or ":memory:"


def create_adapter(config: DatabaseConfig) -> Executor:
    """Create an executor based on the database URL scheme.

    Args:
        config: Database configuration with URL.

    Returns:
        An Executor instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from modelrest.persistence.sqlite import SQLiteAdapter

        return SQLiteAdapter(config.sqlite_path)

    if config.is_postgresql:
        from modelrest.persistence.postgresql import PostgreSQLAdapter

        return PostgreSQLAdapter(config.url)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
