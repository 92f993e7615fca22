"""Tests for LLM client selection."""

from __future__ import annotations

import pytest

from glide_flow.breakdown import ClaudeAgentSDKClient, MockLLMClient, ResponseParser, SplitParser
from glide_flow.clients import (
    MOCK_BREAKDOWN_RESPONSE,
    MOCK_SPLIT_RESPONSE,
    create_llm_client,
    setup_mock_responses,
)


class TestCreateLLMClient:
    """Tests for create_llm_client."""

    def test_mock_provider(self) -> None:
        """The mock provider answers with canned responses."""
        client = create_llm_client("mock")

        assert isinstance(client, MockLLMClient)
        assert client.responses == setup_mock_responses()

    def test_claude_provider(self) -> None:
        """The claude provider builds the SDK client without importing the SDK."""
        client = create_llm_client("claude", max_turns=3)

        assert isinstance(client, ClaudeAgentSDKClient)
        assert client.max_turns == 3

    def test_unknown_provider(self) -> None:
        """Unknown providers raise ValueError."""
        with pytest.raises(ValueError, match="Unknown LLM provider: gpt"):
            create_llm_client("gpt")


class TestMockResponses:
    """The canned responses parse cleanly."""

    def test_breakdown_response_parses(self) -> None:
        """The breakdown response yields a title and three steps."""
        parsed = ResponseParser().parse(MOCK_BREAKDOWN_RESPONSE)

        assert parsed.title == "Clean Your Kitchen"
        assert len(parsed.steps) == 3

    def test_split_response_parses(self) -> None:
        """The split response yields exactly two steps."""
        assert len(SplitParser().parse_steps(MOCK_SPLIT_RESPONSE)) == 2
