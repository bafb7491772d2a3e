"""Integration test fixtures (full pipeline against the scripted backend).

The backend decides responses from the Authorization header, so session
refresh flows run end to end through the real middleware.
"""

import pytest

from network_layer.middleware.user_session import UserSession

from fixtures.backend import respond


@pytest.fixture
def user_session() -> UserSession:
    return UserSession(access_token="access-1", refresh_token="refresh-1")


@pytest.fixture
def refresh_endpoint(backend):
    """Scripts v1/auth/refresh to rotate tokens to access-2/refresh-2."""
    backend.enqueue(
        "/v1/auth/refresh",
        respond(200, json={"tokens": {"access_token": "access-2", "refresh_token": "refresh-2"}}),
    )
