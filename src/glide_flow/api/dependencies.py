"""Request dependencies resolving lifespan-managed components.

The application lifespan stores the database and coordinator on app.state;
these helpers hand them to route functions via Depends().
"""

from __future__ import annotations

from fastapi import Request

from ..database import FlowDB
from ..flow_coordinator import FlowMutationCoordinator


def get_db_dep(request: Request) -> FlowDB:
    """Get the FlowDB for this application.

    Raises:
        RuntimeError: If the application lifespan has not started.
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("Dependencies not initialized. Is the app lifespan running?")
    return db  # type: ignore[no-any-return]


def get_coordinator_dep(request: Request) -> FlowMutationCoordinator:
    """Get the FlowMutationCoordinator for this application.

    Raises:
        RuntimeError: If the application lifespan has not started.
    """
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise RuntimeError("Dependencies not initialized. Is the app lifespan running?")
    return coordinator  # type: ignore[no-any-return]
