"""Async SQLite database for flows and steps.

This package provides the persistence layer for generated flows.
All operations are async using aiosqlite for non-blocking I/O.
"""

from __future__ import annotations

from .connection import DEFAULT_DB_PATH, SCHEMA_PATH
from .core import FlowDB
from .exceptions import FlowNotFoundError, StepNotFoundError, StorageError

__all__ = [
    "DEFAULT_DB_PATH",
    "FlowDB",
    "FlowNotFoundError",
    "SCHEMA_PATH",
    "StepNotFoundError",
    "StorageError",
]
