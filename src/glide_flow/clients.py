"""LLM client selection for the CLI and API entry points."""

from __future__ import annotations

import logging

from .breakdown import ClaudeAgentSDKClient, LLMClient, MockLLMClient

logger = logging.getLogger(__name__)

MOCK_BREAKDOWN_RESPONSE = """**Title: Clean Your Kitchen**
**Step 1: Clear the Counters** (⏳ 10 min)
* Put away anything that does not live there.
* Completion cue: ✅ Counters are empty

**Step 2: Wash the Dishes** (⏳ 15 min)
* Start with glasses, finish with pans.
* Completion cue: ✅ Sink is empty

**Step 3: Wipe Surfaces** (⏳ 5 min)
* Counters, stove top, and table.
* Completion cue: ✅ Everything shines
"""

MOCK_SPLIT_RESPONSE = """**Step 1: Do the First Half** (⏳ 5 min)
* Tackle the easiest part first.
* Completion cue: ✅ First half done

**Step 2: Do the Second Half** (⏳ 5 min)
* Finish what remains.
* Completion cue: ✅ Second half done
"""


def setup_mock_responses() -> dict[str, str]:
    """Set up canned responses for the mock provider.

    Returns:
        Dictionary mapping prompt substrings to mock responses.
    """
    return {
        "STEP TO SPLIT": MOCK_SPLIT_RESPONSE,
        "Now break down this user's task:": MOCK_BREAKDOWN_RESPONSE,
    }


def create_llm_client(provider: str = "claude", max_turns: int = 1) -> LLMClient:
    """Create the LLM client for a configured provider.

    Args:
        provider: "claude" for the Agent SDK, "mock" for canned responses.
        max_turns: Conversation turns for the SDK client.

    Returns:
        LLM client instance.

    Raises:
        ValueError: If the provider is unknown.

    Note:
        The production client uses Claude Agent SDK subscription auth.
        Ensure you are logged in via `claude login` before using.
    """
    if provider == "mock":
        logger.info("Using mock LLM client")
        return MockLLMClient(responses=setup_mock_responses())
    if provider == "claude":
        logger.info("Using Claude Agent SDK client (subscription auth via `claude login`)")
        return ClaudeAgentSDKClient(max_turns=max_turns)
    msg = f"Unknown LLM provider: {provider}"
    raise ValueError(msg)
