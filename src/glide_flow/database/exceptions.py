"""Exceptions for storage operations.

StorageError is what the flow coordinator raises for any failure of the
storage collaborator. The not-found kinds also subclass LookupError so the
HTTP layer maps them to 404 alongside other lookups.
"""

from __future__ import annotations


class StorageError(Exception):
    """Raised when a storage read or write fails.

    The message is stable and safe to show to end users; the underlying
    database error is chained via ``__cause__`` and logged.
    """

    pass


class FlowNotFoundError(StorageError, LookupError):
    """Raised when a flow id does not exist."""

    pass


class StepNotFoundError(StorageError, LookupError):
    """Raised when a step id does not exist."""

    pass
