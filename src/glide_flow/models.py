"""Domain models for persisted flows and steps.

This module defines the typed records exchanged with the storage layer:

    Flow  1 --- N  Step

A Step belongs to exactly one Flow. Within a flow, step_number values form
the contiguous sequence 1..N; the coordinator and renumbering logic keep it
that way across creation and splitting.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Flow:
    """A saved, ordered checklist generated from one task description.

    Attributes:
        id: Opaque unique identifier assigned by storage.
        title: Non-empty flow title.
        created_at: ISO-8601 UTC creation timestamp.
        updated_at: ISO-8601 UTC timestamp of the last title change.
    """

    id: str
    title: str
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Flow:
        """Build a Flow from a database row."""
        return cls(
            id=str(row["id"]),
            title=str(row["title"]),
            created_at=str(row["created_at"]),
            updated_at=str(row["updated_at"]),
        )


@dataclass(frozen=True)
class Step:
    """One ordered item within a Flow.

    Attributes:
        id: Opaque unique identifier assigned by storage.
        flow_id: Owning flow.
        step_number: Position within the flow, 1-based.
        title: Short imperative text.
        time_estimate: Free-text duration, only ever propagated.
        description: Newline-separated action lines.
        completion_cue: Phrase signalling the step is done.
        is_completed: Completion state.
        created_at: ISO-8601 UTC creation timestamp.
        updated_at: ISO-8601 UTC timestamp of the last change.
    """

    id: str
    flow_id: str
    step_number: int
    title: str
    time_estimate: str
    description: str
    completion_cue: str
    is_completed: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Step:
        """Build a Step from a database row (is_completed stored as 0/1)."""
        return cls(
            id=str(row["id"]),
            flow_id=str(row["flow_id"]),
            step_number=int(row["step_number"]),
            title=str(row["title"]),
            time_estimate=str(row["time_estimate"]),
            description=str(row["description"]),
            completion_cue=str(row["completion_cue"]),
            is_completed=bool(row["is_completed"]),
            created_at=str(row["created_at"]),
            updated_at=str(row["updated_at"]),
        )


@dataclass(frozen=True)
class NewStep:
    """Insert record for a step that does not exist yet."""

    step_number: int
    title: str
    time_estimate: str
    description: str
    completion_cue: str
    is_completed: bool = False


@dataclass(frozen=True)
class StepPosition:
    """A step's identity and current position, used for renumbering."""

    id: str
    step_number: int


@dataclass(frozen=True)
class StepNumberChange:
    """A step whose number must change, and the number it changes to."""

    step_id: str
    new_step_number: int


@dataclass(frozen=True)
class FlowStats:
    """Completion statistics for one flow.

    Attributes:
        total_steps: Number of steps in the flow.
        completed_steps: Number of steps marked complete.
        completion_percentage: Rounded percentage, 0 for an empty flow.
    """

    total_steps: int
    completed_steps: int
    completion_percentage: int

    @classmethod
    def from_counts(cls, total_steps: int, completed_steps: int) -> FlowStats:
        """Build stats from raw counts, rounding half up."""
        if total_steps > 0:
            percentage = (200 * completed_steps + total_steps) // (2 * total_steps)
        else:
            percentage = 0
        return cls(
            total_steps=total_steps,
            completed_steps=completed_steps,
            completion_percentage=percentage,
        )
