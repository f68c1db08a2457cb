"""
Core pytest configuration and fixtures for geminichat testing.

This module provides shared test fixtures, configuration, and utilities
that support the pillar-based testing architecture.
"""

from typing import Callable, List
from unittest.mock import MagicMock

import httpx
import pytest
from geminichat.config import Settings, get_settings
from geminichat.models import ASSISTANT_SENDER, USER_SENDER, Message

# ===== TEST DATA FIXTURES =====


@pytest.fixture
def sample_messages() -> List[Message]:
    """Sample chat messages for testing."""
    return [
        Message(sender=USER_SENDER, text="hi"),
        Message(sender=ASSISTANT_SENDER, text="hello"),
    ]


@pytest.fixture
def reply_body() -> Callable[[str], dict]:
    """Builds a generateContent response body holding ``text``."""

    def build(text: str) -> dict:
        return {
            "candidates": [
                {"content": {"role": "model", "parts": [{"text": text}]}}
            ]
        }

    return build


# ===== CONFIGURATION FIXTURES =====


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolates tests from the developer's GEMINI_* variables and .env file."""
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "GEMINI_BASE_URL", "GEMINI_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", base_url="https://gemini.test/v1beta")


# ===== HTTP FIXTURES =====


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def mock_http(recorded_requests):
    """Returns a factory for httpx clients backed by a canned handler."""

    def build(handler) -> httpx.Client:
        def record(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.Client(transport=httpx.MockTransport(record))

    return build


@pytest.fixture
def gemini(settings, mock_http, reply_body):
    """A Gemini client whose endpoint always answers "I am well"."""
    from geminichat.llm import Gemini

    client = mock_http(lambda request: httpx.Response(200, json=reply_body("I am well")))
    return Gemini(settings=settings, client=client)


# ===== MOCK FIXTURES =====


@pytest.fixture
def mock_llm():
    """Mock LLM provider for testing."""
    mock = MagicMock()
    mock.complete.return_value = "Mock LLM response"
    return mock


# ===== APP FIXTURES =====


@pytest.fixture
def test_app():
    """
    Provides a GeminiChat app instance with simple, predictable pillars.

    This fixture is ideal for integration tests where we need a running app
    but want to avoid external dependencies like the Gemini API.
    """
    from geminichat import GeminiChat
    from geminichat.layout import Minimal
    from geminichat.llm import Echo
    from geminichat.store import InMemory

    return GeminiChat(layout=Minimal(), llm=Echo(delay=0), store=InMemory())


# ===== CONFIGURATION =====


def pytest_configure(config):
    """Pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
