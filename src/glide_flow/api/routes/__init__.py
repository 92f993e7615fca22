"""Route registration for FastAPI app.

Wires the route modules (health, flows, steps) to the FastAPI app with
their URL prefixes.
"""

from __future__ import annotations

from fastapi import FastAPI

from . import flows, health, steps


def register_routes(app: FastAPI) -> None:
    """Register all route modules to the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(flows.router, prefix="/flows", tags=["flows"])
    app.include_router(steps.router, prefix="/steps", tags=["steps"])
