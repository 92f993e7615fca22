"""Exceptions for the task breakdown module.

This module defines the exception hierarchy for turning model output into
structured steps, following the error handling patterns established in the
codebase.
"""

from __future__ import annotations


class BreakdownError(Exception):
    """Base exception for all breakdown-related errors.

    This is the root exception class for the breakdown module.
    All other breakdown exceptions inherit from this class.
    """

    pass


class ParseError(BreakdownError):
    """Raised when model output lacks the minimum expected structure.

    This exception is raised when:
    - The response contains zero recognizable step headers
    - A split response yields fewer than two steps

    Always fatal to the enclosing operation; never retried automatically.
    """

    pass


class GenerationError(BreakdownError):
    """Raised when a breakdown or split request cannot produce steps.

    Wraps both provider failures (network, quota, malformed output) and
    ParseError. The message is fixed and safe to show to end users; the
    underlying cause is chained via ``__cause__`` and logged.
    """

    pass
