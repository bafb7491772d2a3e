"""Unit test fixtures (requests, responses and stub middleware).

Provides pipeline values built without a transport.
"""

import json
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from network_layer.middleware.base import Success
from network_layer.models.context import RequestContext
from network_layer.models.enums import HTTPMethod
from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse


@pytest.fixture
def sample_request() -> HTTPRequest:
    """GET request for a session-bound resource."""
    return HTTPRequest(method=HTTPMethod.GET, path="v1/items", max_retry_count=3)


@pytest.fixture
def create_response():
    """Factory fixture to create an HTTPResponse for a request.

    Usage:
        def test_something(create_response, sample_request):
            response = create_response(sample_request, status_code=503, retry_count=1)
    """
    def _create(
        request: HTTPRequest,
        status_code: int | None = 200,
        body: Any = None,
        headers: dict[str, str] | None = None,
        retry_count: int = 0,
        error: Exception | None = None,
    ) -> HTTPResponse:
        content = json.dumps(body).encode() if body is not None else b""
        return HTTPResponse(
            request=request,
            context=RequestContext(request=request, retry_count=retry_count),
            status_code=status_code,
            headers=httpx.Headers(headers or {}),
            content=content,
            url=f"https://api.test/{request.path}",
            error=error,
        )

    return _create


class StubMiddleware:
    """Middleware with a fixed response verdict, recording what it saw."""

    def __init__(self, verdict=None, header: tuple[str, str] | None = None, handles_responses: bool = True):
        self.verdict = verdict
        self.header = header
        self.handles_responses = handles_responses
        self.seen_requests: list[HTTPRequest] = []
        self.seen_responses: list[HTTPResponse] = []

    def should_process_request(self, request: HTTPRequest) -> bool:
        return self.header is not None

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        self.seen_requests.append(request)
        name, value = self.header
        return request.with_headers({name: value})

    def should_process_response(self, response: HTTPResponse) -> bool:
        return self.handles_responses

    def process_response(self, response: HTTPResponse):
        self.seen_responses.append(response)
        if self.verdict is None:
            return Success(response)
        return self.verdict


@pytest.fixture
def stub_middleware():
    """Factory fixture returning StubMiddleware instances."""
    return StubMiddleware


@pytest.fixture
def mock_send():
    """AsyncMock standing in for the client's pipeline entry point."""
    return AsyncMock()
