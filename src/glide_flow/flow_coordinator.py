"""Flow mutation coordinator.

Coordinates the multi-record writes behind creating a flow from a task and
splitting one step into two. The storage layer offers no cross-call
transaction, so partial failures are undone with explicit compensating
writes:

    create_flow: breakdown -> insert flow -> insert steps (1..N)
                 steps fail => delete the flow, then raise
    split_step:  fetch step -> split via LLM -> renumber later steps
                 -> overwrite target -> insert second step at target + 1
                 overwrite/insert fail => restore target, revert renumber
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from .breakdown.orchestrator import ProgressCallback, TaskBreakdownOrchestrator, notify
from .breakdown.parser import ParsedFlow, ParsedStep
from .database.exceptions import StepNotFoundError, StorageError
from .models import Flow, NewStep, Step, StepNumberChange, StepPosition
from .step_renumber import StepRenumberer

logger = logging.getLogger(__name__)

CREATE_FLOW_FAILED_MESSAGE = "Failed to create flow"
CREATE_STEPS_FAILED_MESSAGE = "Failed to create steps"
SPLIT_WRITE_FAILED_MESSAGE = "Failed to save split steps"
STEP_LOOKUP_FAILED_MESSAGE = "Failed to load step"


class FlowStore(Protocol):
    """Storage operations the coordinator depends on."""

    async def insert_flow(self, title: str) -> Flow: ...

    async def delete_flow(self, flow_id: str) -> bool: ...

    async def insert_steps(self, flow_id: str, new_steps: Sequence[NewStep]) -> list[Step]: ...

    async def insert_step(self, flow_id: str, new_step: NewStep) -> Step: ...

    async def get_step(self, step_id: str) -> Step | None: ...

    async def get_step_positions(self, flow_id: str) -> list[StepPosition]: ...

    async def apply_step_numbers(self, changes: Sequence[StepNumberChange]) -> int: ...

    async def update_step_content(
        self,
        step_id: str,
        *,
        title: str,
        time_estimate: str,
        description: str,
        completion_cue: str,
    ) -> Step | None: ...


def _new_step(parsed: ParsedStep, step_number: int) -> NewStep:
    return NewStep(
        step_number=step_number,
        title=parsed.title,
        time_estimate=parsed.time_estimate,
        description=parsed.description,
        completion_cue=parsed.completion_cue,
    )


class FlowMutationCoordinator:
    """Creates flows and splits steps while keeping step numbers contiguous.

    Assumes callers serialize create/split operations per flow; no lock is
    taken here.
    """

    def __init__(
        self,
        store: FlowStore,
        orchestrator: TaskBreakdownOrchestrator,
        renumberer: StepRenumberer | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: Storage collaborator.
            orchestrator: Breakdown orchestrator used for LLM calls.
            renumberer: Renumbering strategy (default StepRenumberer).
        """
        self.store = store
        self.orchestrator = orchestrator
        self.renumberer = renumberer or StepRenumberer()

    # =========================================================================
    # Flow Creation
    # =========================================================================

    async def create_flow(
        self,
        task_text: str,
        on_progress: ProgressCallback | None = None,
        *,
        stream: bool | None = None,
        on_chunk: ProgressCallback | None = None,
    ) -> Flow:
        """Break down a task and persist it as a flow with steps.

        Steps are numbered 1..N in the order the model emitted them, ignoring
        the numbers the model claimed.

        Args:
            task_text: The user's task. Callers reject blank text beforehand.
            on_progress: Optional callback for progress messages.
            stream: Use the streaming call. Defaults to the orchestrator config.
            on_chunk: Optional callback for raw fragments when streaming.

        Returns:
            The created Flow.

        Raises:
            GenerationError: If the breakdown fails; nothing is written.
            StorageError: If a write fails; no flow is left behind.
        """
        use_stream = self.orchestrator.config.stream if stream is None else stream
        parsed: ParsedFlow
        if use_stream:
            parsed = await self.orchestrator.breakdown_stream(
                task_text, on_chunk=on_chunk, on_progress=on_progress
            )
        else:
            parsed = await self.orchestrator.breakdown(task_text, on_progress=on_progress)

        notify(on_progress, "Creating your flow...")
        try:
            flow = await self.store.insert_flow(parsed.title)
        except Exception as e:
            logger.error(f"Flow insert failed: {e}")
            raise StorageError(CREATE_FLOW_FAILED_MESSAGE) from e

        notify(on_progress, "Adding steps...")
        new_steps = [_new_step(step, number) for number, step in enumerate(parsed.steps, start=1)]
        try:
            await self.store.insert_steps(flow.id, new_steps)
        except Exception as e:
            logger.error(f"Step insert failed for flow {flow.id}, removing flow: {e}")
            await self._discard_flow(flow.id)
            raise StorageError(CREATE_STEPS_FAILED_MESSAGE) from e

        notify(on_progress, "Flow created successfully!")
        logger.info(f"Flow {flow.id} created with {len(new_steps)} steps")
        return flow

    async def _discard_flow(self, flow_id: str) -> None:
        """Best-effort delete of a flow whose steps could not be written."""
        try:
            await self.store.delete_flow(flow_id)
        except Exception as e:
            logger.error(f"Compensating delete of flow {flow_id} failed: {e}")

    # =========================================================================
    # Step Splitting
    # =========================================================================

    async def split_step(
        self,
        step_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[Step, Step]:
        """Replace one step with two, shifting later steps down by one.

        The target keeps its id and step_number and takes the first split
        step's content; the second split step is inserted right after it.

        Args:
            step_id: The step to split.
            on_progress: Optional callback for progress messages.

        Returns:
            The updated target step and the newly inserted step.

        Raises:
            StepNotFoundError: If the step does not exist.
            GenerationError: If the split request fails; nothing is written.
            StorageError: If a write fails; completed writes are compensated.
        """
        notify(on_progress, "Getting step details...")
        try:
            step = await self.store.get_step(step_id)
        except Exception as e:
            logger.error(f"Step lookup failed for {step_id}: {e}")
            raise StorageError(STEP_LOOKUP_FAILED_MESSAGE) from e
        if step is None:
            raise StepNotFoundError(f"Step not found: {step_id}")

        first, second = await self.orchestrator.split_step(
            step.title, step.description, step.time_estimate, on_progress=on_progress
        )

        notify(on_progress, "Creating new steps...")
        # Renumber must be fully applied before the insert at step_number + 1
        try:
            positions = await self.store.get_step_positions(step.flow_id)
            changes = self.renumberer.renumber(positions, step.step_number)
            await self.store.apply_step_numbers(changes)
        except Exception as e:
            logger.error(f"Renumbering flow {step.flow_id} failed: {e}")
            raise StorageError(SPLIT_WRITE_FAILED_MESSAGE) from e

        content_replaced = False
        try:
            updated = await self.store.update_step_content(
                step.id,
                title=first.title,
                time_estimate=first.time_estimate,
                description=first.description,
                completion_cue=first.completion_cue,
            )
            if updated is None:
                raise StepNotFoundError(f"Step not found: {step_id}")
            content_replaced = True
            created = await self.store.insert_step(
                step.flow_id, _new_step(second, step.step_number + 1)
            )
        except Exception as e:
            logger.error(f"Split of step {step.id} failed, rolling back: {e}")
            await self._rollback_split(step, changes, content_replaced)
            if isinstance(e, StorageError):
                raise
            raise StorageError(SPLIT_WRITE_FAILED_MESSAGE) from e

        notify(on_progress, "Split completed!")
        logger.info(f"Step {step.id} split; new step {created.id} at {created.step_number}")
        return updated, created

    async def _rollback_split(
        self,
        original: Step,
        changes: Sequence[StepNumberChange],
        content_replaced: bool,
    ) -> None:
        """Best-effort undo of a partially applied split."""
        if content_replaced:
            try:
                await self.store.update_step_content(
                    original.id,
                    title=original.title,
                    time_estimate=original.time_estimate,
                    description=original.description,
                    completion_cue=original.completion_cue,
                )
            except Exception as e:
                logger.error(f"Restoring content of step {original.id} failed: {e}")

        try:
            await self.store.apply_step_numbers(self.renumberer.revert(changes))
        except Exception as e:
            logger.error(
                f"Reverting renumber of flow {original.flow_id} failed; "
                f"step numbers may have a gap: {e}"
            )
