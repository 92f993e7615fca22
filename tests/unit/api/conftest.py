"""Shared fixtures for API unit tests.

Runs the real application factory against an in-memory database and the
mock LLM provider. TestClient is used as a context manager so the
lifespan opens and closes the database.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from glide_flow.api import create_app
from glide_flow.breakdown import MockLLMClient
from glide_flow.clients import setup_mock_responses


@pytest.fixture
def mock_llm() -> MockLLMClient:
    """Mock client answering breakdown and split prompts."""
    return MockLLMClient(responses=setup_mock_responses())


@pytest.fixture
def client(mock_llm: MockLLMClient) -> Iterator[TestClient]:
    """Test client with the lifespan running."""
    app = create_app(db_path=":memory:", llm_client=mock_llm)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def created_flow(client: TestClient) -> dict[str, Any]:
    """A flow created through the API from the mock breakdown."""
    response = client.post("/flows", json={"task": "clean the kitchen"})
    assert response.status_code == 201, response.text
    return response.json()  # type: ignore[no-any-return]
