"""Composed FlowDB class.

Combines all mixin classes into the final FlowDB that provides
the complete storage API.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .connection import ConnectionMixin
from .flows import FlowMixin
from .steps import StepMixin


class FlowDB(ConnectionMixin, FlowMixin, StepMixin):
    """Async SQLite store for flows and their steps.

    Usage:
        async with FlowDB("flows.db") as db:
            flow = await db.insert_flow("Plan the move")
            steps = await db.get_steps(flow.id)
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for testing.
                     Defaults to flows.db in the current working directory.
        """
        super().__init__(db_path)

    async def __aenter__(self) -> FlowDB:
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
