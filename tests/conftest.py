"""Shared pytest fixtures for Notewise tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from notewise.artifacts import SourceMaterial
from notewise.config import Settings
from notewise.engine import StudyTasks
from notewise.llm import InvocationError, InvocationResult, NOT_CONFIGURED


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings with a test API key."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-api-key")
    return Settings(_env_file=None, openai_api_key="test-api-key")


@pytest.fixture
def unconfigured_settings(monkeypatch) -> Settings:
    """Settings with no API key at all."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return Settings(_env_file=None, openai_api_key=None)


@pytest.fixture
def mock_llm():
    """Stand-in for OpenAIClient; set ``invoke.return_value`` per test."""
    mock = MagicMock()
    mock.configured = True
    mock.invoke = AsyncMock(return_value=InvocationResult.success("{}"))
    mock.invoke_vision = AsyncMock(return_value=InvocationResult.success(""))
    return mock


@pytest.fixture
def tasks(mock_llm) -> StudyTasks:
    return StudyTasks(mock_llm)


@pytest.fixture
def respond_with(mock_llm):
    """Make the mock model return the given output for the next calls."""

    def _respond(output: str) -> None:
        mock_llm.invoke.return_value = InvocationResult.success(output)

    return _respond


@pytest.fixture
def fail_with(mock_llm):
    def _fail(kind: str = "backend", message: str = "boom") -> None:
        mock_llm.invoke.return_value = InvocationResult.failure(InvocationError(kind, message))

    return _fail


@pytest.fixture
def unconfigure(mock_llm):
    """Switch the mock model to "no API key" behaviour."""

    def _unconfigure() -> None:
        mock_llm.configured = False
        mock_llm.invoke.return_value = InvocationResult.failure(NOT_CONFIGURED)
        mock_llm.invoke_vision.return_value = InvocationResult.failure(NOT_CONFIGURED)

    return _unconfigure


@pytest.fixture
def sample_materials() -> list[SourceMaterial]:
    return [
        SourceMaterial(id="n1", title="Cell Biology", content="Mitosis is cell division.", subject="Biology"),
        SourceMaterial(id="n2", title="Photosynthesis", content="Plants convert light into chemical energy."),
    ]
