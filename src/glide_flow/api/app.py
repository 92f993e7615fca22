"""FastAPI application factory with lifespan dependency management."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI

from ..breakdown import (
    BreakdownConfig,
    LLMClient,
    TaskBreakdownOrchestrator,
    cleanup_sdk_child_processes,
)
from ..clients import create_llm_client
from ..database import DEFAULT_DB_PATH, FlowDB
from ..flow_coordinator import FlowMutationCoordinator
from .middleware.error_handler import register_error_handlers
from .routes import register_routes

logger = logging.getLogger(__name__)

DB_PATH_ENV_VAR = "GLIDE_DB_PATH"
LLM_PROVIDER_ENV_VAR = "GLIDE_LLM_PROVIDER"


def _default_db_path() -> str | Path:
    return os.environ.get(DB_PATH_ENV_VAR) or DEFAULT_DB_PATH


def create_app(
    db_path: str | Path | None = None,
    llm_client: LLMClient | None = None,
    breakdown_config: BreakdownConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: SQLite database path. Defaults to $GLIDE_DB_PATH, then
            flows.db in the working directory.
        llm_client: LLM client. Defaults to the provider named by
            $GLIDE_LLM_PROVIDER (Claude when unset).
        breakdown_config: Parser fallbacks and streaming default.

    Returns:
        A configured FastAPI application with lifespan management.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        resolved_path = db_path if db_path is not None else _default_db_path()
        client = llm_client or create_llm_client(
            os.environ.get(LLM_PROVIDER_ENV_VAR, "claude")
        )

        db = FlowDB(resolved_path)
        await db.connect()
        orchestrator = TaskBreakdownOrchestrator(client, breakdown_config)
        app.state.db = db
        app.state.orchestrator = orchestrator
        app.state.coordinator = FlowMutationCoordinator(db, orchestrator)
        logger.info("API started with database %s", resolved_path)
        try:
            yield
        finally:
            await db.close()
            app.state.db = None
            app.state.coordinator = None
            if llm_client is None:
                cleanup_sdk_child_processes()

    app = FastAPI(
        title="Glide",
        version="0.1.0",
        docs_url="/docs",
        lifespan=lifespan,
    )

    register_error_handlers(app)
    register_routes(app)

    return app
