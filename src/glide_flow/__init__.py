"""Glide task breakdown.

This package turns an overwhelming task into a saved flow of small, ordered
steps using an LLM, and lets any step be split into two while keeping the
flow's step numbers contiguous.
"""

from __future__ import annotations

from .breakdown import (
    GenerationError,
    ParsedFlow,
    ParsedStep,
    ParseError,
    ResponseParser,
    SplitParser,
    TaskBreakdownOrchestrator,
)
from .database import FlowDB, FlowNotFoundError, StepNotFoundError, StorageError
from .flow_coordinator import FlowMutationCoordinator
from .models import Flow, FlowStats, NewStep, Step, StepNumberChange, StepPosition
from .step_renumber import StepRenumberer

__version__ = "0.1.0"

__all__ = [
    "Flow",
    "FlowDB",
    "FlowMutationCoordinator",
    "FlowNotFoundError",
    "FlowStats",
    "GenerationError",
    "NewStep",
    "ParseError",
    "ParsedFlow",
    "ParsedStep",
    "ResponseParser",
    "SplitParser",
    "Step",
    "StepNotFoundError",
    "StepNumberChange",
    "StepPosition",
    "StepRenumberer",
    "StorageError",
    "TaskBreakdownOrchestrator",
]
