"""Flows router for creating, listing, renaming and deleting flows."""

from fastapi import APIRouter, Depends, Response

from ...database import FlowDB, FlowNotFoundError
from ...flow_coordinator import FlowMutationCoordinator
from ...models import Flow
from ..dependencies import get_coordinator_dep, get_db_dep
from ..models import (
    CreateFlowRequest,
    FlowDetailResponse,
    FlowResponse,
    FlowStatsResponse,
    StepResponse,
    UpdateFlowTitleRequest,
)

router = APIRouter()


async def _flow_detail(db: FlowDB, flow: Flow) -> FlowDetailResponse:
    steps = await db.get_steps(flow.id)
    stats = await db.get_flow_stats(flow.id)
    return FlowDetailResponse(
        **FlowResponse.model_validate(flow).model_dump(),
        steps=[StepResponse.model_validate(step) for step in steps],
        stats=FlowStatsResponse.model_validate(stats),
    )


async def _require_flow(db: FlowDB, flow_id: str) -> Flow:
    flow = await db.get_flow(flow_id)
    if flow is None:
        raise FlowNotFoundError(f"Flow not found: {flow_id}")
    return flow


@router.post("", status_code=201)
async def create_flow(
    body: CreateFlowRequest,
    db: FlowDB = Depends(get_db_dep),
    coordinator: FlowMutationCoordinator = Depends(get_coordinator_dep),
) -> FlowDetailResponse:
    """Break a task down and save it as a new flow.

    Args:
        body: The task to break down.
        db: Database dependency (injected).
        coordinator: Flow coordinator dependency (injected).

    Returns:
        The created flow with its steps and stats.
    """
    flow = await coordinator.create_flow(body.task, stream=False)
    return await _flow_detail(db, flow)


@router.get("")
async def list_flows(db: FlowDB = Depends(get_db_dep)) -> list[FlowResponse]:
    """List all flows, newest first."""
    return [FlowResponse.model_validate(flow) for flow in await db.list_flows()]


@router.get("/{flow_id}")
async def get_flow(flow_id: str, db: FlowDB = Depends(get_db_dep)) -> FlowDetailResponse:
    """Get a flow with its ordered steps and stats.

    Raises:
        FlowNotFoundError: If the flow does not exist (404).
    """
    return await _flow_detail(db, await _require_flow(db, flow_id))


@router.patch("/{flow_id}")
async def rename_flow(
    flow_id: str,
    body: UpdateFlowTitleRequest,
    db: FlowDB = Depends(get_db_dep),
) -> FlowResponse:
    """Rename a flow.

    Raises:
        FlowNotFoundError: If the flow does not exist (404).
    """
    flow = await db.update_flow_title(flow_id, body.title)
    if flow is None:
        raise FlowNotFoundError(f"Flow not found: {flow_id}")
    return FlowResponse.model_validate(flow)


@router.delete("/{flow_id}", status_code=204)
async def delete_flow(flow_id: str, db: FlowDB = Depends(get_db_dep)) -> Response:
    """Delete a flow and all of its steps.

    Raises:
        FlowNotFoundError: If the flow does not exist (404).
    """
    if not await db.delete_flow(flow_id):
        raise FlowNotFoundError(f"Flow not found: {flow_id}")
    return Response(status_code=204)


@router.get("/{flow_id}/stats")
async def get_flow_stats(flow_id: str, db: FlowDB = Depends(get_db_dep)) -> FlowStatsResponse:
    """Get completion statistics for a flow.

    Raises:
        FlowNotFoundError: If the flow does not exist (404).
    """
    await _require_flow(db, flow_id)
    return FlowStatsResponse.model_validate(await db.get_flow_stats(flow_id))
