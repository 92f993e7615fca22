"""Step queries, mutations, and renumbering.

Provides the StepMixin with all step-related database methods. Multi-row
writes run inside one transaction and roll back on failure, so a batch is
either fully applied or not at all.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence

import aiosqlite

from ..models import NewStep, Step, StepNumberChange, StepPosition

logger = logging.getLogger(__name__)

_INSERT_STEP_SQL = """
    INSERT INTO steps (
        id, flow_id, step_number, title, time_estimate,
        description, completion_cue, is_completed
    )
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


def _step_params(step_id: str, flow_id: str, new_step: NewStep) -> tuple[object, ...]:
    return (
        step_id,
        flow_id,
        new_step.step_number,
        new_step.title,
        new_step.time_estimate,
        new_step.description,
        new_step.completion_cue,
        int(new_step.is_completed),
    )


class StepMixin:
    """Mixin providing step CRUD, completion updates, and renumbering."""

    _conn: aiosqlite.Connection | None
    _write_lock: asyncio.Lock

    async def _ensure_connected(self) -> None: ...

    # =========================================================================
    # Step Queries
    # =========================================================================

    async def get_step(self, step_id: str) -> Step | None:
        """Get a step by id.

        Args:
            step_id: The step identifier.

        Returns:
            The Step, or None if not found.
        """
        await self._ensure_connected()
        if not self._conn:
            return None

        async with self._conn.execute("SELECT * FROM steps WHERE id = ?", (step_id,)) as cursor:
            row = await cursor.fetchone()
            if row:
                return Step.from_row(row)
        return None

    async def get_steps(self, flow_id: str) -> list[Step]:
        """Get all steps of a flow ordered by step_number.

        Args:
            flow_id: The owning flow.

        Returns:
            List of Step records.
        """
        await self._ensure_connected()
        if not self._conn:
            return []

        async with self._conn.execute(
            "SELECT * FROM steps WHERE flow_id = ? ORDER BY step_number", (flow_id,)
        ) as cursor:
            rows = await cursor.fetchall()
            return [Step.from_row(row) for row in rows]

    async def get_step_positions(self, flow_id: str) -> list[StepPosition]:
        """Get (id, step_number) for every step of a flow, ordered.

        Args:
            flow_id: The owning flow.

        Returns:
            List of StepPosition records.
        """
        await self._ensure_connected()
        if not self._conn:
            return []

        async with self._conn.execute(
            "SELECT id, step_number FROM steps WHERE flow_id = ? ORDER BY step_number",
            (flow_id,),
        ) as cursor:
            rows = await cursor.fetchall()
            return [StepPosition(id=str(row["id"]), step_number=int(row["step_number"])) for row in rows]

    # =========================================================================
    # Step Creation
    # =========================================================================

    async def insert_steps(self, flow_id: str, new_steps: Sequence[NewStep]) -> list[Step]:
        """Insert a batch of steps in one transaction.

        Args:
            flow_id: The owning flow (must exist).
            new_steps: Insert records, already numbered.

        Returns:
            The created Steps ordered by step_number.

        Raises:
            RuntimeError: If the database is not connected.
            aiosqlite.Error: If any insert fails; nothing is written.
        """
        await self._ensure_connected()
        if not self._conn:
            msg = "Database not connected"
            raise RuntimeError(msg)

        params = [_step_params(uuid.uuid4().hex, flow_id, step) for step in new_steps]
        async with self._write_lock:
            try:
                await self._conn.executemany(_INSERT_STEP_SQL, params)
                await self._conn.commit()
            except Exception:
                await self._conn.rollback()
                raise

        logger.debug("Inserted %d steps into flow %s", len(params), flow_id)
        return await self.get_steps(flow_id)

    async def insert_step(self, flow_id: str, new_step: NewStep) -> Step:
        """Insert a single step.

        Args:
            flow_id: The owning flow (must exist).
            new_step: Insert record with its step_number.

        Returns:
            The created Step.

        Raises:
            RuntimeError: If the database is not connected.
            aiosqlite.Error: If the insert fails (e.g. duplicate step_number).
        """
        await self._ensure_connected()
        if not self._conn:
            msg = "Database not connected"
            raise RuntimeError(msg)

        step_id = uuid.uuid4().hex
        async with self._write_lock:
            try:
                await self._conn.execute(_INSERT_STEP_SQL, _step_params(step_id, flow_id, new_step))
                await self._conn.commit()
            except Exception:
                await self._conn.rollback()
                raise

        step = await self.get_step(step_id)
        if step is None:
            msg = f"Step {step_id} missing after insert"
            raise RuntimeError(msg)
        return step

    # =========================================================================
    # Step Mutations
    # =========================================================================

    async def apply_step_numbers(self, changes: Sequence[StepNumberChange]) -> int:
        """Apply a renumbering batch in one transaction.

        Numbers are first written negated, then flipped positive, so the
        (flow_id, step_number) unique constraint never observes a transient
        duplicate regardless of row update order.

        Args:
            changes: Steps to move and their new numbers.

        Returns:
            Number of steps renumbered.

        Raises:
            RuntimeError: If the database is not connected.
            aiosqlite.Error: If any update fails; nothing is written.
        """
        if not changes:
            return 0

        await self._ensure_connected()
        if not self._conn:
            msg = "Database not connected"
            raise RuntimeError(msg)

        negated = [(-change.new_step_number, change.step_id) for change in changes]
        ids = [(change.step_id,) for change in changes]
        async with self._write_lock:
            try:
                await self._conn.executemany(
                    "UPDATE steps SET step_number = ? WHERE id = ?", negated
                )
                await self._conn.executemany(
                    """
                    UPDATE steps
                    SET step_number = -step_number,
                        updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
                    WHERE id = ? AND step_number < 0
                    """,
                    ids,
                )
                await self._conn.commit()
            except Exception:
                await self._conn.rollback()
                raise

        logger.debug("Renumbered %d steps", len(changes))
        return len(changes)

    async def update_step_content(
        self,
        step_id: str,
        *,
        title: str,
        time_estimate: str,
        description: str,
        completion_cue: str,
    ) -> Step | None:
        """Overwrite a step's content, keeping its id, number and completion.

        Args:
            step_id: The step identifier.
            title: New title.
            time_estimate: New time estimate.
            description: New description.
            completion_cue: New completion cue.

        Returns:
            The updated Step, or None if not found.
        """
        await self._ensure_connected()
        if not self._conn:
            return None

        async with self._write_lock:
            cursor = await self._conn.execute(
                """
                UPDATE steps
                SET title = ?, time_estimate = ?, description = ?, completion_cue = ?,
                    updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
                WHERE id = ?
                """,
                (title, time_estimate, description, completion_cue, step_id),
            )
            await self._conn.commit()
            if cursor.rowcount == 0:
                return None

        return await self.get_step(step_id)

    async def set_step_completion(self, step_id: str, is_completed: bool) -> Step | None:
        """Mark a step complete or incomplete.

        Args:
            step_id: The step identifier.
            is_completed: New completion state.

        Returns:
            The updated Step, or None if not found.
        """
        await self._ensure_connected()
        if not self._conn:
            return None

        async with self._write_lock:
            cursor = await self._conn.execute(
                """
                UPDATE steps
                SET is_completed = ?, updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
                WHERE id = ?
                """,
                (int(is_completed), step_id),
            )
            await self._conn.commit()
            if cursor.rowcount == 0:
                return None

        logger.info("Step %s completion set to %s", step_id, is_completed)
        return await self.get_step(step_id)
