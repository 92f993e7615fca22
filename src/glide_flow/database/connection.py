"""Database connection management and schema initialization.

Provides the base ConnectionMixin with connection lifecycle, schema setup,
and generic query helpers.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

# Schema file ships inside the package next to this module
SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

# Default database path
DEFAULT_DB_PATH = Path.cwd() / "flows.db"


class ConnectionMixin:
    """Base mixin providing database connection management.

    Manages the aiosqlite connection lifecycle, schema initialization,
    and generic query/update helpers.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for testing.
                     Defaults to flows.db in the current working directory.
        """
        if db_path is None:
            self.db_path: str | Path = DEFAULT_DB_PATH
        elif isinstance(db_path, str):
            self.db_path = Path(db_path) if db_path != ":memory:" else db_path
        else:
            self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None
        self._initialized = False
        self._write_lock = asyncio.Lock()

    async def __aenter__(self) -> ConnectionMixin:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def connect(self) -> None:
        """Open database connection and initialize schema."""
        db_path = str(self.db_path) if isinstance(self.db_path, Path) else self.db_path
        if db_path != ":memory:":
            resolved_path = Path(db_path).resolve()
            resolved_path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Database: %s (exists: %s)", resolved_path, resolved_path.exists())
        self._conn = await aiosqlite.connect(db_path)
        self._conn.row_factory = aiosqlite.Row
        # Per-connection setting; required for flow -> steps cascade
        await self._conn.execute("PRAGMA foreign_keys = ON")
        await self._initialize_schema()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def _ensure_connected(self) -> None:
        """Ensure database is connected."""
        if self._conn is None:
            await self.connect()

    async def _initialize_schema(self) -> None:
        """Initialize database schema from SQL file.

        Raises:
            RuntimeError: If schema initialization fails.
                          Delete the database file to start fresh.
        """
        if not self._conn:
            msg = "Database not connected"
            raise RuntimeError(msg)

        if self._initialized:
            return

        schema_sql = SCHEMA_PATH.read_text(encoding="utf-8")
        async with self._write_lock:
            try:
                await self._conn.executescript(schema_sql)
                await self._conn.commit()
                self._initialized = True
                logger.info("Database schema initialized")
            except Exception as e:
                msg = (
                    f"Schema initialization failed: {e}\n"
                    f"To fix: Delete {self.db_path} and run again."
                )
                raise RuntimeError(msg) from e
