"""Configuration for the task breakdown pipeline.

This module defines the configuration dataclass holding the fallback values
the parser substitutes when model output omits a field, and whether the
breakdown call streams by default.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BreakdownConfig:
    """Configuration for parsing and generating task breakdowns.

    Attributes:
        default_title: Flow title used when the response has no Title line.
        default_completion_cue: Cue used when a step has no Completion cue line.
        default_description: Description used when a step body is empty.
        stream: Use the streaming generation call for new flows.
    """

    default_title: str = "Your Task Breakdown"
    default_completion_cue: str = "Step completed"
    default_description: str = "Complete this step"
    stream: bool = False


# Default configuration instance for convenience
DEFAULT_BREAKDOWN_CONFIG = BreakdownConfig()
