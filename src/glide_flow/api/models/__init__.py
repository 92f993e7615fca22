"""Pydantic request and response models for the Glide API."""

from __future__ import annotations

from .requests import CreateFlowRequest, StepCompletionRequest, UpdateFlowTitleRequest
from .responses import (
    FlowDetailResponse,
    FlowResponse,
    FlowStatsResponse,
    SplitStepResponse,
    StepResponse,
)

__all__ = [
    "CreateFlowRequest",
    "FlowDetailResponse",
    "FlowResponse",
    "FlowStatsResponse",
    "SplitStepResponse",
    "StepCompletionRequest",
    "StepResponse",
    "UpdateFlowTitleRequest",
]
