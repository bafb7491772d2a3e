"""Request tracing middleware."""

import uuid

import structlog

from network_layer.middleware.base import ProcessingResult, Success
from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestTracingMiddleware:
    """Middleware to add request ID tracing to all requests.

    Features:
    - Generates a unique request_id (UUID4) per attempt unless one is already set
    - Adds X-Request-ID request header for server-side correlation
    - Logs every response with its status and latency
    """

    def should_process_request(self, request: HTTPRequest) -> bool:
        return REQUEST_ID_HEADER not in request.headers

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        return request.with_headers({REQUEST_ID_HEADER: str(uuid.uuid4())})

    def should_process_response(self, response: HTTPResponse) -> bool:
        return True

    def process_response(self, response: HTTPResponse) -> ProcessingResult:
        logger.info(
            "Response received",
            request_id=response.request.headers.get(REQUEST_ID_HEADER),
            method=response.request.method.value,
            path=response.request.path,
            status_code=response.status_code,
            duration_ms=response.elapsed_ms,
            retry_count=response.context.retry_count,
        )
        return Success(response)
