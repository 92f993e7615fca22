"""Tests for FlowMutationCoordinator.

Runs the coordinator against an in-memory FlowDB and a MockLLMClient,
injecting storage failures with patch.object to exercise the compensating
writes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, patch

import pytest

from glide_flow.breakdown import (
    FailingLLMClient,
    GenerationError,
    MockLLMClient,
    TaskBreakdownOrchestrator,
)
from glide_flow.database import FlowDB, StepNotFoundError, StorageError
from glide_flow.flow_coordinator import (
    CREATE_FLOW_FAILED_MESSAGE,
    CREATE_STEPS_FAILED_MESSAGE,
    SPLIT_WRITE_FAILED_MESSAGE,
    FlowMutationCoordinator,
)
from glide_flow.models import NewStep, Step

MISNUMBERED_BREAKDOWN = """**Title: Clean the Garage**
**Step 1: Sort Boxes** (⏳ 20 min)
* Keep, donate, toss.
* Completion cue: Three piles

**Step 5: Sweep** (⏳ 10 min)
* Corners first.
* Completion cue: Floor is clear

**Step 2: Haul Donations** (⏳ 30 min)
* Load the car.
* Completion cue: Car is packed
"""

SPLIT_RESPONSE = """**Step 1: Open the Folder** (⏳ 2 min)
* Find the folder.
* Completion cue: Folder open

**Step 2: File the Papers** (⏳ 8 min)
* One paper at a time.
* Completion cue: Papers filed
"""


@pytest.fixture
async def db() -> AsyncIterator[FlowDB]:
    """Provide a connected in-memory database."""
    async with FlowDB(":memory:") as database:
        yield database


@pytest.fixture
def client() -> MockLLMClient:
    """Mock client answering breakdown and split prompts."""
    return MockLLMClient(
        responses={
            "STEP TO SPLIT": SPLIT_RESPONSE,
            "Now break down this user's task:": MISNUMBERED_BREAKDOWN,
        }
    )


@pytest.fixture
def coordinator(db: FlowDB, client: MockLLMClient) -> FlowMutationCoordinator:
    """Coordinator wired to the in-memory database and mock client."""
    return FlowMutationCoordinator(db, TaskBreakdownOrchestrator(client))


async def _seed_flow(db: FlowDB, count: int) -> list[Step]:
    flow = await db.insert_flow("Seeded")
    return await db.insert_steps(
        flow.id,
        [
            NewStep(
                step_number=n,
                title=f"Original {n}",
                time_estimate=f"{n} min",
                description=f"Details {n}",
                completion_cue=f"Cue {n}",
            )
            for n in range(1, count + 1)
        ],
    )


class TestCreateFlow:
    """Tests for creating a flow from task text."""

    @pytest.mark.asyncio
    async def test_steps_renumbered_contiguously(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """Steps are stored 1..N in emission order, ignoring claimed numbers."""
        flow = await coordinator.create_flow("clean the garage")

        steps = await db.get_steps(flow.id)
        assert flow.title == "Clean the Garage"
        assert [s.step_number for s in steps] == [1, 2, 3]
        assert [s.title for s in steps] == ["Sort Boxes", "Sweep", "Haul Donations"]
        assert all(not s.is_completed for s in steps)

    @pytest.mark.asyncio
    async def test_progress_messages_in_order(self, coordinator: FlowMutationCoordinator) -> None:
        """Progress callbacks fire in order."""
        messages: list[str] = []

        await coordinator.create_flow("task", on_progress=messages.append)

        assert messages == [
            "Breaking down your task...",
            "Creating your flow...",
            "Adding steps...",
            "Flow created successfully!",
        ]

    @pytest.mark.asyncio
    async def test_streaming_create(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """stream=True forwards fragments and stores the same steps."""
        chunks: list[str] = []

        flow = await coordinator.create_flow("task", stream=True, on_chunk=chunks.append)

        assert "".join(chunks) == MISNUMBERED_BREAKDOWN
        assert len(await db.get_steps(flow.id)) == 3

    @pytest.mark.asyncio
    async def test_generation_failure_writes_nothing(self) -> None:
        """A failed breakdown never touches storage."""
        store = AsyncMock()
        coordinator = FlowMutationCoordinator(
            store, TaskBreakdownOrchestrator(MockLLMClient(default_response="no step headers here"))
        )

        with pytest.raises(GenerationError):
            await coordinator.create_flow("task")

        store.insert_flow.assert_not_awaited()
        store.insert_steps.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_failure_writes_nothing(self, db: FlowDB) -> None:
        """A provider error surfaces as GenerationError with no flow saved."""
        coordinator = FlowMutationCoordinator(
            db, TaskBreakdownOrchestrator(FailingLLMClient("quota_exceeded"))
        )

        with pytest.raises(GenerationError):
            await coordinator.create_flow("task")

        assert await db.list_flows() == []

    @pytest.mark.asyncio
    async def test_flow_insert_failure(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """A failed flow insert raises StorageError and writes no steps."""
        with patch.object(db, "insert_flow", AsyncMock(side_effect=RuntimeError("disk"))):
            with pytest.raises(StorageError, match=CREATE_FLOW_FAILED_MESSAGE):
                await coordinator.create_flow("task")

    @pytest.mark.asyncio
    async def test_step_insert_failure_deletes_flow(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """A failed step batch removes the just-created flow."""
        with patch.object(db, "insert_steps", AsyncMock(side_effect=RuntimeError("disk"))):
            with pytest.raises(StorageError, match=CREATE_STEPS_FAILED_MESSAGE) as exc_info:
                await coordinator.create_flow("task")

        assert await db.list_flows() == []
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_failed_compensating_delete_keeps_original_error(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """If the cleanup delete fails too, the step failure still propagates."""
        with (
            patch.object(db, "insert_steps", AsyncMock(side_effect=RuntimeError("disk"))),
            patch.object(db, "delete_flow", AsyncMock(side_effect=RuntimeError("also disk"))),
        ):
            with pytest.raises(StorageError, match=CREATE_STEPS_FAILED_MESSAGE):
                await coordinator.create_flow("task")


class TestSplitStep:
    """Tests for splitting one step into two."""

    @pytest.mark.asyncio
    async def test_split_middle_step_renumbers(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """Splitting step 2 of 4 leaves five contiguous steps."""
        original = await _seed_flow(db, 4)

        updated, created = await coordinator.split_step(original[1].id)

        steps = await db.get_steps(original[0].flow_id)
        assert [s.step_number for s in steps] == [1, 2, 3, 4, 5]
        assert [s.id for s in steps] == [
            original[0].id,
            original[1].id,
            created.id,
            original[2].id,
            original[3].id,
        ]
        assert (updated.id, updated.step_number, updated.title) == (
            original[1].id,
            2,
            "Open the Folder",
        )
        assert (created.step_number, created.title) == (3, "File the Papers")
        assert created.is_completed is False

    @pytest.mark.asyncio
    async def test_split_last_step(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """Splitting the last step appends the second half."""
        original = await _seed_flow(db, 2)

        _, created = await coordinator.split_step(original[1].id)

        assert created.step_number == 3
        assert [s.step_number for s in await db.get_steps(original[0].flow_id)] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_split_sends_step_context(
        self, db: FlowDB, coordinator: FlowMutationCoordinator, client: MockLLMClient
    ) -> None:
        """The split prompt carries the target step's content."""
        original = await _seed_flow(db, 1)
        messages: list[str] = []

        await coordinator.split_step(original[0].id, on_progress=messages.append)

        assert "Title: Original 1" in client.call_history[-1]
        assert messages == [
            "Getting step details...",
            "Breaking down step...",
            "Creating new steps...",
            "Split completed!",
        ]

    @pytest.mark.asyncio
    async def test_missing_step(
        self, coordinator: FlowMutationCoordinator, client: MockLLMClient
    ) -> None:
        """Splitting an unknown step raises StepNotFoundError before any LLM call."""
        with pytest.raises(StepNotFoundError):
            await coordinator.split_step("missing")

        assert client.get_call_count() == 0

    @pytest.mark.asyncio
    async def test_generation_failure_leaves_flow_untouched(self, db: FlowDB) -> None:
        """A failed split request writes nothing."""
        original = await _seed_flow(db, 3)
        coordinator = FlowMutationCoordinator(
            db,
            TaskBreakdownOrchestrator(MockLLMClient(default_response="Step 1: One (⏳ 1 min)")),
        )

        with pytest.raises(GenerationError):
            await coordinator.split_step(original[0].id)

        assert await db.get_steps(original[0].flow_id) == original

    @pytest.mark.asyncio
    async def test_insert_failure_rolls_back(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """If the new step cannot be inserted, content and numbering are restored."""
        original = await _seed_flow(db, 4)

        with patch.object(db, "insert_step", AsyncMock(side_effect=RuntimeError("disk"))):
            with pytest.raises(StorageError, match=SPLIT_WRITE_FAILED_MESSAGE):
                await coordinator.split_step(original[1].id)

        steps = await db.get_steps(original[0].flow_id)
        assert [s.id for s in steps] == [s.id for s in original]
        assert [s.step_number for s in steps] == [1, 2, 3, 4]
        assert steps[1].title == "Original 2"
        assert steps[1].description == "Details 2"

    @pytest.mark.asyncio
    async def test_update_failure_reverts_renumber(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """If the target update fails, the renumber batch is reverted."""
        original = await _seed_flow(db, 3)

        with patch.object(db, "update_step_content", AsyncMock(side_effect=RuntimeError("disk"))):
            with pytest.raises(StorageError):
                await coordinator.split_step(original[0].id)

        steps = await db.get_steps(original[0].flow_id)
        assert [s.step_number for s in steps] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_renumber_failure(
        self, db: FlowDB, coordinator: FlowMutationCoordinator
    ) -> None:
        """A failed renumber batch raises StorageError and changes nothing."""
        original = await _seed_flow(db, 3)

        with patch.object(db, "apply_step_numbers", AsyncMock(side_effect=RuntimeError("disk"))):
            with pytest.raises(StorageError, match=SPLIT_WRITE_FAILED_MESSAGE):
                await coordinator.split_step(original[0].id)

        assert await db.get_steps(original[0].flow_id) == original
