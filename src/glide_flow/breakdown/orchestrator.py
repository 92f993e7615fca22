"""Task breakdown orchestrator.

This module implements the TaskBreakdownOrchestrator which sends a user's
task (or one step to split) to the LLM and hands the raw text to the parser:
- breakdown: one completed response, parsed into a ParsedFlow
- breakdown_stream: fragments forwarded as they arrive, parsed once at the end
- split_step: a split response, parsed into exactly two steps

Any provider failure or ParseError surfaces as a single GenerationError with
a fixed user-safe message; the cause is logged and chained.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .config import DEFAULT_BREAKDOWN_CONFIG, BreakdownConfig
from .exceptions import GenerationError, ParseError
from .llm_client import LLMClient
from .parser import ParsedFlow, ParsedStep, ResponseParser, SplitParser
from .prompts import format_step_split_prompt, format_task_breakdown_prompt

# Callback type for human-readable progress messages and raw stream fragments
ProgressCallback = Callable[[str], None]

logger = logging.getLogger(__name__)

BREAKDOWN_FAILED_MESSAGE = "Failed to break down task. Please try again."
SPLIT_FAILED_MESSAGE = "Failed to split step. Please try again."


def notify(callback: ProgressCallback | None, message: str) -> None:
    """Invoke a progress callback without letting it affect control flow.

    Args:
        callback: Optional callback to invoke.
        message: The message or fragment to pass along.
    """
    if callback is None:
        return
    try:
        callback(message)
    except Exception as e:
        logger.warning(f"Progress callback raised, ignoring: {e}")


class TaskBreakdownOrchestrator:
    """Turns task text into parsed steps via one LLM call.

    Holds no mutable state beyond its collaborators, so one instance can be
    shared by every caller in a process.
    """

    def __init__(
        self,
        client: LLMClient,
        config: BreakdownConfig | None = None,
        parser: ResponseParser | None = None,
        split_parser: SplitParser | None = None,
    ) -> None:
        """Initialize the orchestrator with an LLM client.

        Args:
            client: LLM client implementing the LLMClient protocol.
            config: Optional configuration (uses defaults if not provided).
            parser: Parser for breakdown responses.
            split_parser: Parser for split responses.
        """
        self.client = client
        self.config = config or DEFAULT_BREAKDOWN_CONFIG
        self.parser = parser or ResponseParser(self.config)
        self.split_parser = split_parser or SplitParser(self.config)

    async def breakdown(
        self,
        task_text: str,
        on_progress: ProgressCallback | None = None,
    ) -> ParsedFlow:
        """Break a task into an ordered list of steps.

        Args:
            task_text: The user's task. Callers reject blank text beforehand.
            on_progress: Optional callback for progress messages.

        Returns:
            ParsedFlow with title and steps.

        Raises:
            GenerationError: If the LLM call fails or the response has no steps.
        """
        notify(on_progress, "Breaking down your task...")
        prompt = format_task_breakdown_prompt(task_text)

        try:
            response = await self.client.send_message(prompt)
            return self.parser.parse(response)
        except ParseError as e:
            logger.error(f"Breakdown response could not be parsed: {e}")
            raise GenerationError(BREAKDOWN_FAILED_MESSAGE) from e
        except Exception as e:
            logger.exception(f"Breakdown LLM call failed: {e}")
            raise GenerationError(BREAKDOWN_FAILED_MESSAGE) from e

    async def breakdown_stream(
        self,
        task_text: str,
        on_chunk: ProgressCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ParsedFlow:
        """Break a task into steps using the streaming call.

        Fragments are forwarded to on_chunk as they arrive. Headers and bodies
        routinely straddle fragment boundaries, so only the fully accumulated
        text is parsed, after the stream ends.

        Args:
            task_text: The user's task. Callers reject blank text beforehand.
            on_chunk: Optional callback receiving each raw fragment.
            on_progress: Optional callback for progress messages.

        Returns:
            ParsedFlow with title and steps.

        Raises:
            GenerationError: If the stream fails or the response has no steps.
        """
        notify(on_progress, "Breaking down your task...")
        prompt = format_task_breakdown_prompt(task_text)

        chunks: list[str] = []
        try:
            async for chunk in self.client.stream_message(prompt):
                chunks.append(chunk)
                notify(on_chunk, chunk)
            return self.parser.parse("".join(chunks))
        except ParseError as e:
            logger.error(f"Streamed breakdown response could not be parsed: {e}")
            raise GenerationError(BREAKDOWN_FAILED_MESSAGE) from e
        except Exception as e:
            logger.exception(
                f"Streaming breakdown failed after {len(chunks)} chunks: {e}"
            )
            raise GenerationError(BREAKDOWN_FAILED_MESSAGE) from e

    async def split_step(
        self,
        title: str,
        description: str,
        time_estimate: str,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[ParsedStep, ParsedStep]:
        """Ask the LLM to split one step into two.

        Only the first two step blocks are used; extra blocks are ignored.

        Args:
            title: Title of the step being split.
            description: Description of the step being split.
            time_estimate: Time estimate of the step being split.
            on_progress: Optional callback for progress messages.

        Returns:
            The two replacement steps, in order.

        Raises:
            GenerationError: If the LLM call fails or fewer than two steps parse.
        """
        notify(on_progress, "Breaking down step...")
        prompt = format_step_split_prompt(title, description, time_estimate)

        try:
            response = await self.client.send_message(prompt)
            steps = self.split_parser.parse_steps(response)
            if len(steps) < 2:
                raise ParseError(f"Expected 2 steps in split response, found {len(steps)}")
        except ParseError as e:
            logger.error(f"Split response could not be parsed: {e}")
            raise GenerationError(SPLIT_FAILED_MESSAGE) from e
        except Exception as e:
            logger.exception(f"Split LLM call failed: {e}")
            raise GenerationError(SPLIT_FAILED_MESSAGE) from e

        if len(steps) > 2:
            logger.info(f"Split response had {len(steps)} steps, using the first 2")
        return steps[0], steps[1]
