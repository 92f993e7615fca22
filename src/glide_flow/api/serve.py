"""Server runner module for the Glide API.

Provides a run_server utility that configures and starts uvicorn
with appropriate defaults.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Iterator

import uvicorn

from .app import DB_PATH_ENV_VAR


@contextmanager
def _temporary_env_var(name: str, value: str | None) -> Iterator[None]:
    """Temporarily set an environment variable, restoring original state on exit."""
    if value is None:
        yield
        return
    old_value = os.environ.get(name)
    os.environ[name] = value
    try:
        yield
    finally:
        if old_value is not None:
            os.environ[name] = old_value
        else:
            os.environ.pop(name, None)


def run_server(
    host: str = "127.0.0.1",
    port: int = 8420,
    log_level: str = "info",
    reload: bool = False,
    db_path: str | None = None,
    **kwargs: Any,
) -> None:
    """Run the Glide API server.

    Args:
        host: The host to bind to. Defaults to '127.0.0.1'.
        port: The port to bind to. Defaults to 8420.
        log_level: The log level for uvicorn. Defaults to 'info'.
        reload: Whether to enable auto-reload. Defaults to False.
        db_path: Optional database path. If provided, sets GLIDE_DB_PATH.
        **kwargs: Additional keyword arguments to forward to uvicorn.run.
    """
    with _temporary_env_var(DB_PATH_ENV_VAR, db_path):
        uvicorn.run(
            "glide_flow.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            log_level=log_level,
            reload=reload,
            **kwargs,
        )
