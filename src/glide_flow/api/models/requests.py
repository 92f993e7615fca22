"""API request models with Pydantic validation."""

from pydantic import BaseModel, Field, field_validator


class CreateFlowRequest(BaseModel):
    """Request model for breaking a task down into a new flow."""

    model_config = {"extra": "forbid"}

    task: str = Field(max_length=10_000)

    @field_validator("task")
    @classmethod
    def validate_task(cls, v: str) -> str:
        """Validate task is not empty or whitespace."""
        if not v or not v.strip():
            raise ValueError("task must not be empty or whitespace")
        return v


class UpdateFlowTitleRequest(BaseModel):
    """Request model for renaming a flow."""

    model_config = {"extra": "forbid"}

    title: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is not empty or whitespace."""
        if not v or not v.strip():
            raise ValueError("title must not be empty or whitespace")
        return v.strip()


class StepCompletionRequest(BaseModel):
    """Request model for toggling a step's completion."""

    model_config = {"extra": "forbid"}

    is_completed: bool
