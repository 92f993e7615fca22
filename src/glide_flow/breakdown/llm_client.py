"""LLM client abstraction for the breakdown pipeline.

This module provides an abstract LLM client protocol and implementations
for both testing (mock, failure simulation) and production (Claude Agent SDK)
use cases. Every client supports a single completed response and a streamed
sequence of raw text fragments.

IMPORTANT: The production client uses Claude Max subscription auth via
`claude login`, NOT API keys. It calls claude_agent_sdk.query() which
authenticates through the subscription model.
"""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

import psutil

logger = logging.getLogger(__name__)


@runtime_checkable
class LLMClient(Protocol):
    """Protocol for LLM clients used by the breakdown orchestrator.

    This protocol defines the interface that all LLM clients must implement.
    It allows for easy swapping between mock clients (for testing) and
    production clients.
    """

    async def send_message(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the response text.

        Args:
            prompt: The formatted prompt to send to the LLM.

        Returns:
            The text response from the LLM.

        Raises:
            LLMClientError: If the call fails.
        """
        ...

    def stream_message(self, prompt: str) -> AsyncIterator[str]:
        """Send a prompt and yield response text fragments as they arrive.

        Args:
            prompt: The formatted prompt to send to the LLM.

        Yields:
            Raw text fragments, in order.

        Raises:
            LLMClientError: If the call fails.
        """
        ...


class LLMClientError(Exception):
    """Base exception for LLM client errors."""

    pass


class LLMResponseParseError(LLMClientError):
    """Raised when LLM response cannot be read as text."""

    pass


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients.

    Subclasses must implement the _call_api method. Streaming falls back to
    yielding the complete response as a single fragment unless _stream_api
    is overridden.
    """

    def __init__(self, model: str = "claude-sonnet-4-20250514") -> None:
        """Initialize the LLM client.

        Args:
            model: The model identifier to use for API calls.
        """
        self.model = model

    @abstractmethod
    async def _call_api(self, prompt: str) -> str:
        """Make the actual API call.

        Args:
            prompt: The prompt to send.

        Returns:
            Raw response text from the API.
        """
        ...

    async def _stream_api(self, prompt: str) -> AsyncIterator[str]:
        """Yield response fragments. Defaults to one fragment."""
        yield await self._call_api(prompt)

    async def send_message(self, prompt: str) -> str:
        """Send a message and return the response.

        Args:
            prompt: The prompt to send to the LLM.

        Returns:
            The text response from the LLM.
        """
        return await self._call_api(prompt)

    async def stream_message(self, prompt: str) -> AsyncIterator[str]:
        """Send a message and yield response fragments.

        Args:
            prompt: The prompt to send to the LLM.

        Yields:
            Raw text fragments, in order.
        """
        async for chunk in self._stream_api(prompt):
            yield chunk


class MockLLMClient(BaseLLMClient):
    """Mock LLM client for testing.

    Returns predefined responses based on prompt content. Useful for
    unit testing the breakdown pipeline without making actual API calls.
    """

    def __init__(
        self,
        responses: dict[str, str] | None = None,
        default_response: str | None = None,
        chunk_size: int = 16,
    ) -> None:
        """Initialize the mock client with predefined responses.

        Args:
            responses: Dict mapping prompt substrings to responses.
            default_response: Fallback response if no match found.
            chunk_size: Fragment length used when streaming.
        """
        super().__init__(model="mock")
        self.responses = responses or {}
        self.default_response = default_response or ""
        self.chunk_size = max(1, chunk_size)
        self.call_history: list[str] = []

    async def _call_api(self, prompt: str) -> str:
        """Return a predefined response based on prompt content.

        Args:
            prompt: The prompt to match against.

        Returns:
            Matching predefined response or default response.
        """
        self.call_history.append(prompt)

        # Check for matching response based on prompt content
        for key, response in self.responses.items():
            if key in prompt:
                logger.debug(f"MockLLMClient matched key: {key}")
                return response

        logger.debug("MockLLMClient using default response")
        return self.default_response

    async def _stream_api(self, prompt: str) -> AsyncIterator[str]:
        """Yield the matched response in fixed-size fragments."""
        response = await self._call_api(prompt)
        for i in range(0, len(response), self.chunk_size):
            yield response[i : i + self.chunk_size]

    def get_call_count(self) -> int:
        """Return the number of API calls made.

        Returns:
            Number of times send_message or stream_message was called.
        """
        return len(self.call_history)

    def reset(self) -> None:
        """Reset call history for fresh test runs."""
        self.call_history.clear()


class FailingLLMClient(BaseLLMClient):
    """Simulates provider failures for testing.

    Error Types:
    - quota_exceeded: Subscription quota exhausted
    - timeout: Async operation timeout (generic)
    - connection_error: Network failure (generic)
    - malformed_response: Model returns text with no step structure
    - partial_response: Truncated response (header cut off mid-line)
    """

    ERROR_TYPES = frozenset(
        {"quota_exceeded", "timeout", "connection_error", "malformed_response", "partial_response"}
    )

    def __init__(
        self,
        error_type: str,
        error_after_calls: int = 0,
        success_response: str = "",
    ) -> None:
        """Initialize the failure simulator.

        Args:
            error_type: One of ERROR_TYPES.
            error_after_calls: Number of successful calls before error triggers.
            success_response: Response returned by the calls before the error.

        Raises:
            ValueError: If error_type is unknown.
        """
        if error_type not in self.ERROR_TYPES:
            raise ValueError(f"Unknown error_type: {error_type}")
        super().__init__(model="failure-simulator")
        self.error_type = error_type
        self.error_after_calls = error_after_calls
        self.success_response = success_response
        self.call_count = 0
        self.errors_raised = 0

    async def _call_api(self, prompt: str) -> str:
        """Simulate an API call, failing once the trigger point is reached."""
        self.call_count += 1

        if self.call_count <= self.error_after_calls:
            return self.success_response

        self.errors_raised += 1

        if self.error_type == "quota_exceeded":
            raise LLMClientError(
                "Query failed: Monthly usage quota exceeded for your Claude Max subscription."
            )
        elif self.error_type == "timeout":
            raise asyncio.TimeoutError("Simulated timeout: Claude query exceeded 60s limit")
        elif self.error_type == "connection_error":
            raise ConnectionError("Simulated network failure: Unable to reach Claude service")
        elif self.error_type == "malformed_response":
            return "Sorry, I can't help with that {{{malformed response from model"
        # partial_response
        return "**Title: Trunc**\n**Step 1: Star"


class ClaudeAgentSDKClient(BaseLLMClient):
    """Claude Agent SDK client for production use.

    Uses claude_agent_sdk.query() with subscription auth via `claude login`.
    Does NOT require API keys - uses Claude Max subscription authentication.
    """

    # The task prompt carries the full output contract
    DEFAULT_SYSTEM_PROMPT = (
        "You are a concise planning assistant. Follow the requested output format "
        "exactly. No preamble and no closing remarks."
    )

    def __init__(
        self,
        max_turns: int = 1,
        system_prompt: str | None = None,
    ) -> None:
        """Initialize the Claude Agent SDK client.

        Args:
            max_turns: Maximum conversation turns (default: 1 for single response).
            system_prompt: Custom system prompt. Defaults to a format-following instruction.
        """
        super().__init__(model="claude-agent-sdk")
        self.max_turns = max_turns
        self.system_prompt = system_prompt or self.DEFAULT_SYSTEM_PROMPT

    async def _call_api(self, prompt: str) -> str:
        """Make a query and return the concatenated assistant text.

        Args:
            prompt: The prompt to send.

        Returns:
            Response text from Claude.

        Raises:
            LLMClientError: If the query fails or SDK not installed.
            LLMResponseParseError: If the model returned no text.
        """
        response_text = ""
        async for chunk in self._stream_api(prompt):
            response_text += chunk
        if not response_text.strip():
            raise LLMResponseParseError("Query returned an empty response")
        return response_text

    async def _stream_api(self, prompt: str) -> AsyncIterator[str]:
        """Yield the text of each assistant message as it arrives.

        Raises:
            LLMClientError: If the query fails or SDK not installed.
        """
        try:
            from claude_agent_sdk import ClaudeAgentOptions, query
        except ImportError as e:
            raise LLMClientError(
                "claude_agent_sdk not installed. Ensure Claude Code CLI is available."
            ) from e

        options = ClaudeAgentOptions(
            tools=[],  # Plain text completion, no tool use
            max_turns=self.max_turns,
            system_prompt=self.system_prompt,
        )

        # IMPORTANT: Explicitly close the generator to prevent CLI hang
        generator = query(prompt=prompt, options=options)
        try:
            async for message in generator:
                # Only AssistantMessage carries model text
                if type(message).__name__ != "AssistantMessage":
                    continue
                text = _message_text(message)
                if text:
                    yield text
        except LLMClientError:
            raise
        except Exception as e:
            logger.error(f"Claude Agent SDK query failed: {e}")
            raise LLMClientError(f"Query failed: {e}") from e
        finally:
            await generator.aclose()  # type: ignore[attr-defined]


def _message_text(message: Any) -> str:
    """Extract text from an SDK message (direct text or TextBlock content)."""
    text_attr = getattr(message, "text", None)
    if text_attr is not None:
        return str(text_attr)

    content = getattr(message, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            block_text = getattr(block, "text", None)
            if block_text is not None:
                parts.append(str(block_text))
        return "".join(parts)
    return ""


def cleanup_sdk_child_processes() -> None:
    """Kill any Claude CLI child processes spawned by this process.

    The Claude Agent SDK spawns actual OS subprocesses that may not terminate
    when the Python generator is closed. This function finds and terminates
    any lingering Claude CLI processes.

    IMPORTANT: Call this ONCE at program exit, not after each SDK call.
    """
    try:
        parent = psutil.Process(os.getpid())
        children = parent.children(recursive=True)

        claude_procs = [p for p in children if "claude" in p.name().lower()]
        for proc in claude_procs:
            try:
                logger.debug(f"Terminating Claude CLI process: {proc.pid}")
                proc.terminate()
            except psutil.NoSuchProcess:
                pass

        # Wait for termination with timeout, then force kill stragglers
        if claude_procs:
            _, alive = psutil.wait_procs(claude_procs, timeout=3)
            for proc in alive:
                try:
                    logger.warning(f"Force killing Claude CLI process: {proc.pid}")
                    proc.kill()
                except psutil.NoSuchProcess:
                    pass
    except Exception as e:
        logger.warning(f"Failed to cleanup child processes: {e}")
