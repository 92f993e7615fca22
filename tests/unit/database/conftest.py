"""Shared fixtures for database unit tests.

Each test gets its own in-memory FlowDB.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest

from glide_flow.database import FlowDB
from glide_flow.models import NewStep


@pytest.fixture
async def db() -> AsyncIterator[FlowDB]:
    """Provide a connected in-memory database."""
    async with FlowDB(":memory:") as database:
        yield database


@pytest.fixture
def make_steps() -> Callable[..., list[NewStep]]:
    """Factory building NewStep records numbered from start."""

    def _make(count: int, start: int = 1) -> list[NewStep]:
        return [
            NewStep(
                step_number=n,
                title=f"Step {n}",
                time_estimate=f"{n} min",
                description=f"Do part {n}",
                completion_cue=f"Part {n} done",
            )
            for n in range(start, start + count)
        ]

    return _make
