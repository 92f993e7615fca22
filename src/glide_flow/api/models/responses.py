"""API response models for Glide.

These Pydantic models serialize the storage dataclasses (Flow, Step,
FlowStats) into API responses via from_attributes.
"""

from pydantic import BaseModel, ConfigDict, Field


class FlowResponse(BaseModel):
    """Response model for Flow entities."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    created_at: str
    updated_at: str


class StepResponse(BaseModel):
    """Response model for Step entities."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    flow_id: str
    step_number: int = Field(ge=1)
    title: str
    time_estimate: str
    description: str
    completion_cue: str
    is_completed: bool
    created_at: str
    updated_at: str


class FlowStatsResponse(BaseModel):
    """Response model for flow completion statistics."""

    model_config = ConfigDict(from_attributes=True)

    total_steps: int = Field(ge=0)
    completed_steps: int = Field(ge=0)
    completion_percentage: int = Field(ge=0, le=100)


class FlowDetailResponse(FlowResponse):
    """Response model for a flow with its ordered steps and stats."""

    steps: list[StepResponse]
    stats: FlowStatsResponse


class SplitStepResponse(BaseModel):
    """Response model for a split: the rewritten step and the new one."""

    updated_step: StepResponse
    new_step: StepResponse
