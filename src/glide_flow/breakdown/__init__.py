"""Breakdown module for turning task text into structured steps.

This module sends a user's overwhelming task to an LLM and parses the
semi-structured response into a title and an ordered list of steps.

Public API:
    Parsing:
    - ParsedFlow / ParsedStep: Transient results of one response
    - ResponseParser: Title and step extraction for breakdown responses
    - SplitParser: Same grammar, used for two-step split responses

    Generation:
    - TaskBreakdownOrchestrator: LLM call plus parsing, with error translation
    - BreakdownConfig: Fallback values and streaming default
    - LLMClient: Protocol for LLM client abstraction
    - ClaudeAgentSDKClient: Production client
    - MockLLMClient / FailingLLMClient: Clients for testing

    Exceptions:
    - BreakdownError: Base exception for breakdown errors
    - ParseError: Response lacked the expected structure
    - GenerationError: Uniform user-safe failure of a breakdown or split
"""

from __future__ import annotations

from .config import DEFAULT_BREAKDOWN_CONFIG, BreakdownConfig
from .exceptions import BreakdownError, GenerationError, ParseError
from .llm_client import (
    ClaudeAgentSDKClient,
    FailingLLMClient,
    LLMClient,
    LLMClientError,
    LLMResponseParseError,
    MockLLMClient,
    cleanup_sdk_child_processes,
)
from .orchestrator import (
    BREAKDOWN_FAILED_MESSAGE,
    SPLIT_FAILED_MESSAGE,
    ProgressCallback,
    TaskBreakdownOrchestrator,
)
from .parser import ParsedFlow, ParsedStep, ResponseParser, SplitParser

__all__ = [
    # Parser
    "ParsedFlow",
    "ParsedStep",
    "ResponseParser",
    "SplitParser",
    # Config
    "BreakdownConfig",
    "DEFAULT_BREAKDOWN_CONFIG",
    # Orchestrator
    "TaskBreakdownOrchestrator",
    "ProgressCallback",
    "BREAKDOWN_FAILED_MESSAGE",
    "SPLIT_FAILED_MESSAGE",
    # LLM Client
    "LLMClient",
    "MockLLMClient",
    "FailingLLMClient",
    "ClaudeAgentSDKClient",
    "cleanup_sdk_child_processes",
    # Exceptions
    "BreakdownError",
    "ParseError",
    "GenerationError",
    "LLMClientError",
    "LLMResponseParseError",
]
