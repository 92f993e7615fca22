"""Flow queries and mutations.

Provides the FlowMixin with flow CRUD and completion statistics.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

import aiosqlite

from ..models import Flow, FlowStats

logger = logging.getLogger(__name__)


class FlowMixin:
    """Mixin providing flow CRUD and statistics."""

    _conn: aiosqlite.Connection | None
    _write_lock: asyncio.Lock

    async def _ensure_connected(self) -> None: ...

    # =========================================================================
    # Flow Queries
    # =========================================================================

    async def get_flow(self, flow_id: str) -> Flow | None:
        """Get a flow by id.

        Args:
            flow_id: The flow identifier.

        Returns:
            The Flow, or None if not found.
        """
        await self._ensure_connected()
        if not self._conn:
            return None

        async with self._conn.execute("SELECT * FROM flows WHERE id = ?", (flow_id,)) as cursor:
            row = await cursor.fetchone()
            if row:
                return Flow.from_row(row)
        return None

    async def list_flows(self) -> list[Flow]:
        """Get all flows, newest first.

        Returns:
            List of Flow records.
        """
        await self._ensure_connected()
        if not self._conn:
            return []

        async with self._conn.execute(
            "SELECT * FROM flows ORDER BY created_at DESC, rowid DESC"
        ) as cursor:
            rows = await cursor.fetchall()
            return [Flow.from_row(row) for row in rows]

    async def get_flow_stats(self, flow_id: str) -> FlowStats:
        """Get completion statistics for a flow.

        Args:
            flow_id: The flow identifier.

        Returns:
            FlowStats (all zero for an unknown or empty flow).
        """
        await self._ensure_connected()
        if not self._conn:
            return FlowStats.from_counts(0, 0)

        async with self._conn.execute(
            """
            SELECT COUNT(*) AS total, COALESCE(SUM(is_completed), 0) AS completed
            FROM steps WHERE flow_id = ?
            """,
            (flow_id,),
        ) as cursor:
            row = await cursor.fetchone()
        if not row:
            return FlowStats.from_counts(0, 0)
        return FlowStats.from_counts(int(row["total"]), int(row["completed"]))

    # =========================================================================
    # Flow Mutations
    # =========================================================================

    async def insert_flow(self, title: str) -> Flow:
        """Insert a new flow.

        Args:
            title: Non-empty flow title.

        Returns:
            The created Flow.

        Raises:
            ValueError: If title is empty or whitespace.
            RuntimeError: If the database is not connected.
        """
        if not title or not title.strip():
            msg = "Flow title must not be empty"
            raise ValueError(msg)

        await self._ensure_connected()
        if not self._conn:
            msg = "Database not connected"
            raise RuntimeError(msg)

        flow_id = uuid.uuid4().hex
        async with self._write_lock:
            await self._conn.execute(
                "INSERT INTO flows (id, title) VALUES (?, ?)",
                (flow_id, title.strip()),
            )
            await self._conn.commit()

        flow = await self.get_flow(flow_id)
        if flow is None:
            msg = f"Flow {flow_id} missing after insert"
            raise RuntimeError(msg)
        logger.info("Flow %s created: %s", flow_id, flow.title)
        return flow

    async def update_flow_title(self, flow_id: str, title: str) -> Flow | None:
        """Rename a flow.

        Args:
            flow_id: The flow identifier.
            title: New non-empty title.

        Returns:
            The updated Flow, or None if not found.

        Raises:
            ValueError: If title is empty or whitespace.
        """
        if not title or not title.strip():
            msg = "Flow title must not be empty"
            raise ValueError(msg)

        await self._ensure_connected()
        if not self._conn:
            return None

        async with self._write_lock:
            cursor = await self._conn.execute(
                """
                UPDATE flows
                SET title = ?, updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
                WHERE id = ?
                """,
                (title.strip(), flow_id),
            )
            await self._conn.commit()
            if cursor.rowcount == 0:
                return None

        return await self.get_flow(flow_id)

    async def delete_flow(self, flow_id: str) -> bool:
        """Delete a flow and, by cascade, all of its steps.

        Deleting a missing flow is a no-op, so compensating deletes can be
        retried safely.

        Args:
            flow_id: The flow identifier.

        Returns:
            True if a flow was deleted, False if it did not exist.
        """
        await self._ensure_connected()
        if not self._conn:
            return False

        async with self._write_lock:
            cursor = await self._conn.execute("DELETE FROM flows WHERE id = ?", (flow_id,))
            await self._conn.commit()
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Flow %s deleted", flow_id)
        return deleted
