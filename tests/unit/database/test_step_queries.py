"""Tests for StepMixin database operations.

Covers batch inserts, single inserts, renumbering batches, content
updates and completion toggling.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable

import pytest

from glide_flow.database import FlowDB
from glide_flow.models import NewStep, StepNumberChange, StepPosition


class TestInsertSteps:
    """Tests for insert_steps and insert_step."""

    @pytest.mark.asyncio
    async def test_batch_insert_ordered(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Inserted steps come back ordered by step_number, not completed."""
        flow = await db.insert_flow("Flow")

        steps = await db.insert_steps(flow.id, list(reversed(make_steps(3))))

        assert [s.step_number for s in steps] == [1, 2, 3]
        assert [s.title for s in steps] == ["Step 1", "Step 2", "Step 3"]
        assert all(not s.is_completed for s in steps)
        assert all(s.flow_id == flow.id for s in steps)

    @pytest.mark.asyncio
    async def test_batch_is_atomic(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """A failing row rolls back the whole batch."""
        flow = await db.insert_flow("Flow")
        batch = make_steps(2) + make_steps(1)  # duplicate step_number 1

        with pytest.raises(sqlite3.IntegrityError):
            await db.insert_steps(flow.id, batch)

        assert await db.get_steps(flow.id) == []

    @pytest.mark.asyncio
    async def test_batch_requires_existing_flow(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Steps cannot reference a missing flow."""
        with pytest.raises(sqlite3.IntegrityError):
            await db.insert_steps("missing", make_steps(1))

    @pytest.mark.asyncio
    async def test_insert_single_step(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """insert_step returns the created step."""
        flow = await db.insert_flow("Flow")

        step = await db.insert_step(flow.id, make_steps(1, start=4)[0])

        assert step.step_number == 4
        assert await db.get_step(step.id) == step

    @pytest.mark.asyncio
    async def test_insert_duplicate_number_fails(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Two steps in one flow cannot share a step_number."""
        flow = await db.insert_flow("Flow")
        await db.insert_steps(flow.id, make_steps(2))

        with pytest.raises(sqlite3.IntegrityError):
            await db.insert_step(flow.id, make_steps(1, start=2)[0])


class TestStepReads:
    """Tests for get_step, get_steps and get_step_positions."""

    @pytest.mark.asyncio
    async def test_positions(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Positions list every step's id and number in order."""
        flow = await db.insert_flow("Flow")
        steps = await db.insert_steps(flow.id, make_steps(3))

        positions = await db.get_step_positions(flow.id)

        assert positions == [StepPosition(id=s.id, step_number=s.step_number) for s in steps]

    @pytest.mark.asyncio
    async def test_missing_step(self, db: FlowDB) -> None:
        """get_step returns None for unknown ids."""
        assert await db.get_step("missing") is None


class TestApplyStepNumbers:
    """Tests for apply_step_numbers."""

    @pytest.mark.asyncio
    async def test_shift_up_without_conflict(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Shifting consecutive steps up never trips the unique constraint."""
        flow = await db.insert_flow("Flow")
        steps = await db.insert_steps(flow.id, make_steps(4))
        # Ascending order would collide if applied row by row
        changes = [
            StepNumberChange(step_id=steps[2].id, new_step_number=4),
            StepNumberChange(step_id=steps[3].id, new_step_number=5),
        ]

        assert await db.apply_step_numbers(changes) == 2

        numbers = {s.id: s.step_number for s in await db.get_steps(flow.id)}
        assert numbers == {steps[0].id: 1, steps[1].id: 2, steps[2].id: 4, steps[3].id: 5}

    @pytest.mark.asyncio
    async def test_empty_batch(self, db: FlowDB) -> None:
        """An empty batch is a no-op."""
        assert await db.apply_step_numbers([]) == 0

    @pytest.mark.asyncio
    async def test_conflicting_batch_rolls_back(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """A batch producing a duplicate number leaves every step unchanged."""
        flow = await db.insert_flow("Flow")
        steps = await db.insert_steps(flow.id, make_steps(4))
        changes = [
            StepNumberChange(step_id=steps[3].id, new_step_number=5),
            StepNumberChange(step_id=steps[2].id, new_step_number=2),
        ]

        with pytest.raises(sqlite3.IntegrityError):
            await db.apply_step_numbers(changes)

        assert [s.step_number for s in await db.get_steps(flow.id)] == [1, 2, 3, 4]
        assert [s.id for s in await db.get_steps(flow.id)] == [s.id for s in steps]


class TestStepUpdates:
    """Tests for update_step_content and set_step_completion."""

    @pytest.mark.asyncio
    async def test_update_content_keeps_identity(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Content updates keep id, number and completion state."""
        flow = await db.insert_flow("Flow")
        step = (await db.insert_steps(flow.id, make_steps(1)))[0]
        await db.set_step_completion(step.id, True)

        updated = await db.update_step_content(
            step.id,
            title="New",
            time_estimate="2 min",
            description="line a\nline b",
            completion_cue="Done",
        )

        assert updated is not None
        assert (updated.id, updated.step_number, updated.is_completed) == (step.id, 1, True)
        assert updated.title == "New"
        assert updated.description == "line a\nline b"

    @pytest.mark.asyncio
    async def test_update_missing(self, db: FlowDB) -> None:
        """Updating an unknown step returns None."""
        result = await db.update_step_content(
            "missing", title="t", time_estimate="e", description="d", completion_cue="c"
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_toggle_completion(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Completion can be set and cleared."""
        flow = await db.insert_flow("Flow")
        step = (await db.insert_steps(flow.id, make_steps(1)))[0]

        done = await db.set_step_completion(step.id, True)
        undone = await db.set_step_completion(step.id, False)

        assert done is not None and done.is_completed is True
        assert undone is not None and undone.is_completed is False

    @pytest.mark.asyncio
    async def test_toggle_missing(self, db: FlowDB) -> None:
        """Toggling an unknown step returns None."""
        assert await db.set_step_completion("missing", True) is None
