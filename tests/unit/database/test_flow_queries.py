"""Tests for FlowMixin database operations.

Covers flow creation, lookup, listing, renaming, cascading delete and stats.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from glide_flow.database import FlowDB
from glide_flow.models import FlowStats, NewStep


class TestFlowCreation:
    """Tests for insert_flow and get_flow."""

    @pytest.mark.asyncio
    async def test_insert_returns_flow(self, db: FlowDB) -> None:
        """insert_flow returns the stored flow with id and timestamps."""
        flow = await db.insert_flow("  Plan the Move  ")

        assert flow.title == "Plan the Move"
        assert len(flow.id) == 32
        assert flow.created_at.endswith("Z")
        assert await db.get_flow(flow.id) == flow

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   "])
    async def test_blank_title_rejected(self, db: FlowDB, title: str) -> None:
        """Blank titles raise ValueError."""
        with pytest.raises(ValueError, match="must not be empty"):
            await db.insert_flow(title)

    @pytest.mark.asyncio
    async def test_get_missing_flow(self, db: FlowDB) -> None:
        """get_flow returns None for unknown ids."""
        assert await db.get_flow("missing") is None

    @pytest.mark.asyncio
    async def test_file_database_creates_parent_dir(self, tmp_path: Path) -> None:
        """A file-backed database creates its parent directory."""
        db_path = tmp_path / "nested" / "flows.db"
        async with FlowDB(db_path) as file_db:
            await file_db.insert_flow("Persisted")

        assert db_path.is_file()
        async with FlowDB(db_path) as reopened:
            assert [f.title for f in await reopened.list_flows()] == ["Persisted"]


class TestFlowListing:
    """Tests for list_flows."""

    @pytest.mark.asyncio
    async def test_newest_first(self, db: FlowDB) -> None:
        """Flows are listed newest first."""
        for title in ("First", "Second", "Third"):
            await db.insert_flow(title)

        assert [f.title for f in await db.list_flows()] == ["Third", "Second", "First"]

    @pytest.mark.asyncio
    async def test_empty(self, db: FlowDB) -> None:
        """An empty database lists no flows."""
        assert await db.list_flows() == []


class TestFlowRename:
    """Tests for update_flow_title."""

    @pytest.mark.asyncio
    async def test_rename(self, db: FlowDB) -> None:
        """Renaming updates the title and keeps the id."""
        flow = await db.insert_flow("Old")

        renamed = await db.update_flow_title(flow.id, " New ")

        assert renamed is not None
        assert renamed.id == flow.id
        assert renamed.title == "New"
        assert renamed.updated_at >= flow.updated_at

    @pytest.mark.asyncio
    async def test_rename_missing(self, db: FlowDB) -> None:
        """Renaming an unknown flow returns None."""
        assert await db.update_flow_title("missing", "Title") is None

    @pytest.mark.asyncio
    async def test_rename_blank(self, db: FlowDB) -> None:
        """Blank titles raise ValueError."""
        flow = await db.insert_flow("Old")
        with pytest.raises(ValueError):
            await db.update_flow_title(flow.id, " ")


class TestFlowDelete:
    """Tests for delete_flow."""

    @pytest.mark.asyncio
    async def test_delete_cascades_to_steps(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Deleting a flow removes its steps."""
        flow = await db.insert_flow("Doomed")
        steps = await db.insert_steps(flow.id, make_steps(3))

        assert await db.delete_flow(flow.id) is True

        assert await db.get_flow(flow.id) is None
        assert await db.get_steps(flow.id) == []
        assert await db.get_step(steps[0].id) is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, db: FlowDB) -> None:
        """Deleting twice reports False the second time."""
        flow = await db.insert_flow("Once")

        assert await db.delete_flow(flow.id) is True
        assert await db.delete_flow(flow.id) is False

    @pytest.mark.asyncio
    async def test_delete_leaves_other_flows(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Only the deleted flow's steps go away."""
        keep = await db.insert_flow("Keep")
        drop = await db.insert_flow("Drop")
        await db.insert_steps(keep.id, make_steps(2))
        await db.insert_steps(drop.id, make_steps(2))

        await db.delete_flow(drop.id)

        assert len(await db.get_steps(keep.id)) == 2


class TestFlowStats:
    """Tests for get_flow_stats and FlowStats rounding."""

    @pytest.mark.asyncio
    async def test_counts_completed_steps(
        self, db: FlowDB, make_steps: Callable[..., list[NewStep]]
    ) -> None:
        """Stats count total and completed steps."""
        flow = await db.insert_flow("Progress")
        steps = await db.insert_steps(flow.id, make_steps(3))
        await db.set_step_completion(steps[0].id, True)

        stats = await db.get_flow_stats(flow.id)

        assert stats == FlowStats(total_steps=3, completed_steps=1, completion_percentage=33)

    @pytest.mark.asyncio
    async def test_empty_flow(self, db: FlowDB) -> None:
        """A flow without steps is 0% complete."""
        flow = await db.insert_flow("Empty")
        assert await db.get_flow_stats(flow.id) == FlowStats(0, 0, 0)

    @pytest.mark.parametrize(
        ("total", "completed", "expected"),
        [(3, 2, 67), (2, 1, 50), (8, 1, 13), (4, 4, 100), (7, 0, 0)],
    )
    def test_percentage_rounds_half_up(self, total: int, completed: int, expected: int) -> None:
        """Percentages round to the nearest integer, halves up."""
        assert FlowStats.from_counts(total, completed).completion_percentage == expected
