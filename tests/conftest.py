"""Shared pytest configuration and fixtures for Model Relay tests."""

import httpx
import pytest
import pytest_asyncio

from model_relay.core.call_log import InMemoryCallLogSink
from model_relay.core.models import Model
from model_relay.core.orchestrator import Orchestrator
from model_relay.core.provider import build_default_registry
from model_relay.core.registry import InMemoryRegistryStore, ModelRegistryAccessor

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]

# Variables the suite controls; anything set in the developer's shell is masked
MANAGED_ENV_VARS = (
    "HOST",
    "PORT",
    "LOG_LEVEL",
    "REQUEST_TIMEOUT",
    "DEFAULT_FEATURE",
    "CLAUDE_MAX_TOKENS",
    "OLLAMA_BASE_URL",
    "REGISTRY_PATH",
    "CALL_LOG_PATH",
    "FALLBACK_PROVIDER",
    "FALLBACK_MODEL",
    "FALLBACK_API_KEYS",
    "GROQ_API_KEYS",
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires services)"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "tests/unit/" in str(item.fspath) or "tests/api/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(scope="function", autouse=True)
def setup_test_environment(tmp_path, monkeypatch):
    """Give every test a clean environment and a fresh config singleton.

    The registry path points into the test's tmp dir, so nothing ever reads
    the developer's real registry.
    """
    for name in MANAGED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REGISTRY_PATH", str(tmp_path / "registry.json"))

    from model_relay.core.config import Config

    Config.reset_singleton()
    yield


@pytest.fixture
def make_model():
    """Factory for registry models with test defaults."""

    def _make(model_id: str, provider: str = "Groq", **kwargs) -> Model:
        kwargs.setdefault("api_keys", ("test-key-1",))
        return Model(id=model_id, provider=provider, **kwargs)

    return _make


@pytest.fixture
def call_log():
    return InMemoryCallLogSink()


@pytest_asyncio.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def build_orchestrator(call_log, http_client):
    """Factory wiring an orchestrator over an in-memory registry."""

    def _build(store: InMemoryRegistryStore, **kwargs) -> Orchestrator:
        kwargs.setdefault("timeout", 5.0)
        return Orchestrator(
            ModelRegistryAccessor(store),
            kwargs.pop("sink", call_log),
            kwargs.pop("adapters", build_default_registry()),
            http_client,
            **kwargs,
        )

    return _build
