"""Shared test fixtures and configuration for all tests.

This conftest.py provides a scripted backend (httpx.MockTransport) and
client factories used across unit and integration tests.
"""

import httpx
import pytest

from network_layer.client.configuration import HTTPClientConfiguration
from network_layer.client.http_client import HTTPClient
from network_layer.config import Settings

from fixtures.backend import MockBackend


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing."""
    return Settings(
        # === Application ===
        APP_NAME="NetworkLayerTest",
        APP_VERSION="0.1.0",
        PLATFORM="python",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Backend ===
        SERVER_URL="https://api.test",
        REQUEST_TIMEOUT=5.0,
        UPLOAD_TIMEOUT=60.0,

        # === Retry ===
        DEFAULT_MAX_RETRY_COUNT=3,
        SESSION_REFRESH_DELAY=0.0,
        TRANSIENT_RETRY_BACKOFF_BASE=2.0,
        TRANSIENT_RETRY_MAX_DELAY=30.0,
    )


@pytest.fixture
def configuration(test_settings: Settings) -> HTTPClientConfiguration:
    """Client configuration built from test settings."""
    return HTTPClientConfiguration.from_settings(test_settings)


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the retry engine, in order."""
    return []


@pytest.fixture
def create_client(configuration: HTTPClientConfiguration, backend: MockBackend, sleeps: list[float]):
    """Factory fixture to create an HTTPClient wired to the scripted backend.

    Usage:
        def test_something(create_client, backend):
            backend.enqueue("/v1/items", respond(200, json={"items": []}))
            client = create_client(middlewares=[...])
    """
    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    def _create(middlewares=(), **config_overrides) -> HTTPClient:
        client_configuration = configuration
        if config_overrides:
            client_configuration = configuration.model_copy(update=config_overrides)
        return HTTPClient(
            configuration=client_configuration,
            session=httpx.AsyncClient(transport=backend.transport),
            middlewares=middlewares,
            sleep=fake_sleep,
        )

    return _create
