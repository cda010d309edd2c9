"""Shared test fixtures and configuration."""
import json
import os
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("RESTAURANT_NAME", "Test Restaurant")

from app.main import app
from app.core.config import Settings
from app.core.dependencies import (
    get_agent_service,
    get_catalog,
    get_menu_repository,
    get_session_manager,
)
from app.services.agent.agent import AgentService
from app.services.agent.orchestrator import ConversationOrchestrator
from app.services.agent.pipeline import RecommendationPipeline
from app.services.chat_session.manager import ChatSessionManager
from app.services.menu.in_memory_menu import InMemoryMenuProvider
from app.services.menu.repository import MenuRepository
from app.services.recommendation.engine import ModelCandidateStrategy, RecommendationEngine


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        openai_api_key="test-key",
        restaurant_name="Test Restaurant",
        thinking_delay_seconds=0,
        default_combo_ids=["braised-pork", "missing-dish", "kungpao-chicken", "tomato-egg"],
        classic_combo_ids=["braised-pork", "tomato-egg", "rice", "egg-soup"],
    )


@pytest.fixture
def test_menu_path():
    """Return path to test menu YAML file."""
    return Path(__file__).parent / "fixtures" / "test_menu.yaml"


@pytest.fixture
def test_menu_repository(test_menu_path):
    """Create menu repository with test data."""
    provider = InMemoryMenuProvider(menu_file=str(test_menu_path))
    return MenuRepository(provider)


@pytest.fixture
async def catalog(test_menu_repository):
    """Normalized test catalog."""
    return await test_menu_repository.get_catalog()


def make_completion(content=None, tool_calls=None):
    """Shape of an OpenAI chat completion as far as the services read it."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_tool_call(arguments, name="recommend_menu", call_id="call_1"):
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments, ensure_ascii=False)
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=raw),
    )


@pytest.fixture
def completion():
    """Factory for plain-text completions."""
    return make_completion


@pytest.fixture
def tool_completion():
    """Factory for completions carrying a recommend_menu tool call."""
    def _tool_completion(arguments, content=None, name="recommend_menu"):
        return make_completion(content=content, tool_calls=[make_tool_call(arguments, name=name)])
    return _tool_completion


@pytest.fixture
def mock_openai():
    """Mock OpenAI API client; tests set create's return_value or side_effect."""
    mock_client = Mock()
    mock_client.chat.completions.create = AsyncMock(
        return_value=make_completion(content="Test response")
    )
    return mock_client


@pytest.fixture
def agent_service(mock_openai, test_settings):
    return AgentService(client=mock_openai, config=test_settings)


@pytest.fixture
def model_engine(catalog, mock_openai, test_settings):
    strategy = ModelCandidateStrategy(catalog, mock_openai, config=test_settings)
    return RecommendationEngine(catalog, strategy, config=test_settings)


@pytest.fixture
def orchestrator(agent_service, model_engine, test_settings):
    pipeline = RecommendationPipeline(agent_service, model_engine)
    return ConversationOrchestrator("test-session", pipeline, config=test_settings)


@pytest.fixture
def session_manager(agent_service, catalog, test_settings):
    return ChatSessionManager(agent_service, catalog, config=test_settings)


@pytest.fixture
def clean_chat_sessions():
    """Clean up chat sessions before and after tests."""
    from app.services.chat_session import manager
    manager._sessions.clear()
    yield
    manager._sessions.clear()


@pytest.fixture
def test_client(test_menu_repository, agent_service, test_settings, clean_chat_sessions):
    """Create FastAPI test client with overrides."""
    async def _override_get_session_manager(catalog=Depends(get_catalog)):
        return ChatSessionManager(agent_service, catalog, config=test_settings)

    app.dependency_overrides[get_menu_repository] = lambda: test_menu_repository
    app.dependency_overrides[get_agent_service] = lambda: agent_service
    app.dependency_overrides[get_session_manager] = _override_get_session_manager

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()
