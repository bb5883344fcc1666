"""
Pytest configuration and shared fixtures.

Provides settings factories, a mock HTTP transport for provider calls, and
environment setup for the Quorum test suite.

IMPORTANT: Environment variables must be set BEFORE importing quorum modules
that use pydantic-settings, as Settings validates on first use.
"""

import os

# Set test environment variables before importing quorum modules
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"
for _name in (
    "AUTH_TOKEN",
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "XAI_API_KEY",
    "DEEPINFRA_API_KEY",
    "SYNTHESIS_MODEL",
):
    os.environ.pop(_name, None)

# Now safe to import everything else
import httpx
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as requiring real API calls"
    )


def _reset_all():
    from quorum import config, credentials
    from quorum.metrics import cost
    from quorum.providers import base
    from quorum.registry import models

    config.get_settings.cache_clear()
    models._registry_instance = None
    cost._calculator = None
    credentials._resolver = None
    base._http_client = None


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset all singleton instances between tests.

    This ensures each test starts with a clean state, including settings
    re-read from the (possibly monkeypatched) environment.
    """
    _reset_all()
    yield
    _reset_all()


@pytest.fixture
def make_settings():
    """
    Factory fixture for Settings that ignore any local .env file.

    Usage:
        settings = make_settings(environment="development", openai_api_key="sk-x")
    """
    from quorum.config import Settings

    def _create(**overrides):
        return Settings(_env_file=None, **overrides)

    return _create


@pytest.fixture
def mock_http():
    """
    Route outbound provider calls through an httpx.MockTransport.

    The returned installer takes a handler (request -> httpx.Response) and
    returns the list every sent request is appended to.

    Usage:
        sent = mock_http(lambda request: httpx.Response(200, json={...}))
    """
    patchers = []

    def _install(handler):
        sent: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
        patcher = patch("quorum.providers.base.get_http_client", return_value=client)
        patcher.start()
        patchers.append(patcher)
        return sent

    yield _install

    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def model_registry():
    """Get the model registry instance."""
    from quorum.registry.models import get_model_registry

    return get_model_registry()


@pytest.fixture
def cost_calculator():
    """Get a fresh CostCalculator instance."""
    from quorum.metrics.cost import CostCalculator

    return CostCalculator()


@pytest.fixture
def caller_keys():
    """A caller-supplied key for every provider."""
    return {
        "ANTHROPIC_API_KEY": "sk-ant-caller",
        "OPENAI_API_KEY": "sk-openai-caller",
        "GOOGLE_API_KEY": "google-caller",
        "XAI_API_KEY": "xai-caller",
        "DEEPINFRA_API_KEY": "deepinfra-caller",
    }


@pytest.fixture
def user_conversation():
    """A one-message conversation."""
    from quorum.schemas.conversation import Message, Role

    return [Message(role=Role.USER, content="What is the capital of France?")]


@pytest.fixture
def test_client():
    """Create a FastAPI TestClient running the application lifespan."""
    from quorum.main import app

    with TestClient(app) as client:
        yield client
