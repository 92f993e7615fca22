"""Steps router for splitting steps and toggling completion."""

from fastapi import APIRouter, Depends

from ...database import FlowDB, StepNotFoundError
from ...flow_coordinator import FlowMutationCoordinator
from ..dependencies import get_coordinator_dep, get_db_dep
from ..models import SplitStepResponse, StepCompletionRequest, StepResponse

router = APIRouter()


@router.post("/{step_id}/split")
async def split_step(
    step_id: str,
    coordinator: FlowMutationCoordinator = Depends(get_coordinator_dep),
) -> SplitStepResponse:
    """Split a step into two, shifting later steps down by one.

    Args:
        step_id: The step to split.
        coordinator: Flow coordinator dependency (injected).

    Returns:
        The rewritten step and the newly inserted step.
    """
    updated, created = await coordinator.split_step(step_id)
    return SplitStepResponse(
        updated_step=StepResponse.model_validate(updated),
        new_step=StepResponse.model_validate(created),
    )


@router.patch("/{step_id}")
async def set_step_completion(
    step_id: str,
    body: StepCompletionRequest,
    db: FlowDB = Depends(get_db_dep),
) -> StepResponse:
    """Mark a step completed or not completed.

    Raises:
        StepNotFoundError: If the step does not exist (404).
    """
    step = await db.set_step_completion(step_id, body.is_completed)
    if step is None:
        raise StepNotFoundError(f"Step not found: {step_id}")
    return StepResponse.model_validate(step)
