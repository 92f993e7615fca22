"""Response parser for extracting structured steps from model output.

This module provides the ResponseParser class which turns one free-form
completion into a flow title plus an ordered list of steps, and the
SplitParser used when one existing step is decomposed into two.

The grammar is independent of markdown emphasis: headers such as
``**Step 1: Do X** (⏳ 5 min)``, ``### Step 1: Do X (⏳ 5 min)`` and
``Step 1: Do X (⏳ 5 min)`` all describe the same step.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .config import DEFAULT_BREAKDOWN_CONFIG, BreakdownConfig
from .exceptions import ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedStep:
    """One step as claimed by the model.

    Attributes:
        step_number: Number taken verbatim from the header. Not trusted to be
            contiguous or ordered; only meaningful within its ParsedFlow.
        title: Short imperative title.
        time_estimate: Free-text duration (e.g. "5 min"), never computed on.
        description: Newline-separated action lines.
        completion_cue: Phrase signalling the step is done.
    """

    step_number: int
    title: str
    time_estimate: str
    description: str
    completion_cue: str


@dataclass(frozen=True)
class ParsedFlow:
    """Structured representation of one breakdown response.

    Attributes:
        title: Flow title (or the configured default).
        steps: Steps in the left-to-right order their headers appeared.
    """

    title: str
    steps: list[ParsedStep] = field(default_factory=list)


def _clean_inline(value: str) -> str:
    """Trim whitespace and wrapping emphasis markers from a captured value."""
    return value.strip().strip("*_").strip()


class ResponseParser:
    """Parser for extracting a title and steps from a breakdown response.

    Example:
        >>> parser = ResponseParser()
        >>> flow = parser.parse("Step 1: Do X (⏳ 5 min)\\nCompletion cue: done")
        >>> flow.steps[0].title
        'Do X'
    """

    # Title label anywhere in a line, optionally wrapped in emphasis; the
    # lookbehind keeps words like "Subtitle:" from matching
    TITLE_PATTERN = re.compile(
        r"(?<![A-Za-z])[*_]*[ \t]*title[ \t]*[*_]*[ \t]*:[ \t]*(.+?)[ \t]*$",
        re.IGNORECASE | re.MULTILINE,
    )
    # Step N: title (⏳ estimate) -- title and estimate are lazy so parentheses
    # inside the title only end it at the hourglass anchor
    STEP_HEADER_PATTERN = re.compile(
        r"(?:#{1,6}[ \t]*)?[*_]*[ \t]*step[ \t]+(\d+)[ \t]*[*_]*[ \t]*:[ \t]*"
        r"(.+?)[ \t]*[*_]*[ \t]*\([ \t]*⏳\ufe0f?[ \t]*(.+?)[ \t]*\)[*_]*",
        re.IGNORECASE,
    )
    COMPLETION_CUE_PATTERN = re.compile(
        r"[*_]*completion[ \t]+cue[ \t]*[*_]*[ \t]*:(.*)",
        re.IGNORECASE,
    )
    BULLET_PATTERN = re.compile(r"^[*\-•+](?:\s+|$)")

    NO_STEPS_MESSAGE = "No steps found in response"

    def __init__(self, config: BreakdownConfig | None = None) -> None:
        """Initialize the parser.

        Args:
            config: Fallback values for missing fields (uses defaults if not provided).
        """
        self.config = config or DEFAULT_BREAKDOWN_CONFIG

    def parse(self, raw_text: str) -> ParsedFlow:
        """Parse a breakdown response into a title and ordered steps.

        Args:
            raw_text: The complete model response.

        Returns:
            ParsedFlow with the extracted title and steps.

        Raises:
            ParseError: If the response contains no step headers.
        """
        steps = self.extract_steps(raw_text)
        if not steps:
            raise ParseError(self.NO_STEPS_MESSAGE)

        title = self.extract_title(raw_text)
        logger.debug("Parsed flow '%s' with %d steps", title, len(steps))
        return ParsedFlow(title=title, steps=steps)

    def extract_title(self, raw_text: str) -> str:
        """Extract the flow title, falling back to the configured default."""
        match = self.TITLE_PATTERN.search(raw_text)
        if match:
            title = _clean_inline(match.group(1))
            if title:
                return title
        return self.config.default_title

    def extract_steps(self, raw_text: str) -> list[ParsedStep]:
        """Extract every step block in source order.

        Header positions are collected first; each body is then the text
        between the end of its header and the start of the next one.

        Args:
            raw_text: The complete model response.

        Returns:
            List of ParsedStep, possibly empty.
        """
        matches = list(self.STEP_HEADER_PATTERN.finditer(raw_text))
        steps: list[ParsedStep] = []

        for i, match in enumerate(matches):
            start = match.end()
            end = matches[i + 1].start() if i + 1 < len(matches) else len(raw_text)
            steps.append(self._build_step(match, raw_text[start:end]))

        return steps

    def _build_step(self, header: re.Match[str], body: str) -> ParsedStep:
        """Build a ParsedStep from its header match and body text."""
        completion_cue = self.config.default_completion_cue
        cue_match = self.COMPLETION_CUE_PATTERN.search(body)
        if cue_match:
            cue = _clean_inline(cue_match.group(1))
            if cue:
                completion_cue = cue
            body = body[: cue_match.start()] + body[cue_match.end() :]

        description = self._clean_description(body) or self.config.default_description

        return ParsedStep(
            step_number=int(header.group(1)),
            title=_clean_inline(header.group(2)),
            time_estimate=_clean_inline(header.group(3)),
            description=description,
            completion_cue=completion_cue,
        )

    def _clean_description(self, body: str) -> str:
        """Drop blank lines, trim each line and strip one leading bullet."""
        lines: list[str] = []
        for line in body.splitlines():
            stripped = self.BULLET_PATTERN.sub("", line.strip(), count=1).strip()
            if stripped:
                lines.append(stripped)
        return "\n".join(lines)


class SplitParser(ResponseParser):
    """Parser for responses that split one step into two.

    Uses the same header and body grammar as ResponseParser. Arity is left to
    the caller: every matched step is returned, and only zero matches fails.
    """

    NO_STEPS_MESSAGE = "No steps found in split response"

    def parse_steps(self, raw_text: str) -> list[ParsedStep]:
        """Parse a split response into its step blocks.

        Args:
            raw_text: The complete model response.

        Returns:
            All matched steps in source order (at least one).

        Raises:
            ParseError: If the response contains no step headers.
        """
        steps = self.extract_steps(raw_text)
        if not steps:
            raise ParseError(self.NO_STEPS_MESSAGE)
        return steps
