"""Pytest configuration and fixtures."""

from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from src.main import app
from src.mcp.dispatcher import Dispatcher
from src.mcp.registry import CapabilityRegistry, get_registry, reset_registry
from src.config.loader import DEFAULT_PROVIDERS, get_settings


@pytest.fixture
def client():
    """Synchronous test client for FastAPI app."""
    return TestClient(app)


@pytest.fixture
async def async_client():
    """Async test client for FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def reset_global_registry():
    """Reset the global registry before each test and load every bundled provider."""
    reset_registry()
    registry = get_registry()
    registry.load_providers(DEFAULT_PROVIDERS)
    registry.freeze()
    yield
    reset_registry()


@pytest.fixture
def registry():
    """Get a fresh, empty registry."""
    return CapabilityRegistry()


@pytest.fixture
def dispatcher():
    """Dispatcher over the global registry with every provider loaded."""
    return Dispatcher(get_registry())


@pytest.fixture
def settings():
    """Get application settings."""
    return get_settings()


@pytest.fixture
def clear_settings_cache():
    """Re-read settings from the environment for the duration of a test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_upstream(monkeypatch):
    """
    Route a provider's outbound HTTP through an httpx.MockTransport.

    Usage: ``requests = mock_upstream("src.tools.weather.client", handler)``
    where ``handler(request) -> httpx.Response``. Returns the list of
    requests the provider sent.
    """
    def _install(module_path: str, handler: Callable[[httpx.Request], httpx.Response]):
        sent: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        def _create_client(timeout=None, headers=None):
            return httpx.AsyncClient(
                transport=httpx.MockTransport(_record),
                headers=headers,
            )

        monkeypatch.setattr(f"{module_path}.create_http_client", _create_client)
        return sent

    return _install


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""
    def _make_request(method: str, params: dict = None, id: int = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }
    return _make_request
