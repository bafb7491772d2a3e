"""
HTTP client orchestrating the request pipeline.

Communicates with the backend using an httpx AsyncClient. Each call runs:
    build -> request middleware -> transport -> response middleware
          -> status validation -> (retry | decode | raise)

Features:
- Middleware chain with Success / Fail / Retry verdicts
- Retry engine with per-request budget and recovery actions
- Structured error envelopes decoded into APIError
- Key-path decoding into pydantic-validated types
- Multipart uploads (in-memory and file-streamed with progress)
"""

import asyncio
import time
from typing import Iterable, Optional, TypeVar, overload

import httpx
import structlog

from network_layer.client.configuration import HTTPClientConfiguration
from network_layer.client.multipart import MultipartEncoder, ProgressCallback
from network_layer.client.request_builder import CONTENT_TYPE_HEADER, build_transport_request
from network_layer.decoding import decode
from network_layer.exceptions import (
    APIError,
    ErrorEnvelope,
    InvalidErrorFormatError,
    NetworkError,
    TransportError,
    TransportTimeoutError,
)
from network_layer.middleware.base import Fail, HTTPMiddleware, Retry, Success
from network_layer.middleware.chain import MiddlewareChain
from network_layer.models.context import RequestContext
from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse
from network_layer.models.upload import DataResource, Multipart, UploadRequest
from network_layer.monitoring.metrics import (
    http_request_latency_seconds,
    http_requests_total,
    upload_bytes_total,
)
from network_layer.retry.engine import RetryEngine, SleepFunction, check_cancellation

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class HTTPClient:
    """
    Entry point for backend calls.

    Domain services build an HTTPRequest and call `send_request` with the
    type they expect back (or None for calls without a payload).

    Middleware is added while the client is set up, before requests are sent.
    """

    def __init__(
        self,
        configuration: HTTPClientConfiguration | None = None,
        session: Optional[httpx.AsyncClient] = None,
        middlewares: Iterable[HTTPMiddleware] = (),
        sleep: Optional[SleepFunction] = None,
    ):
        """
        Initialize the client.

        Args:
            configuration: Server URL, default headers, status range, timeouts
                (defaults to HTTPClientConfiguration.from_settings())
            session: Transport to use; an owned AsyncClient is created lazily otherwise
            middlewares: Initial middleware, in processing order
            sleep: Retry delay coroutine (asyncio.sleep by default)
        """
        self.configuration = configuration or HTTPClientConfiguration.from_settings()
        self._session = session
        self._owns_session = session is None
        self.middlewares = MiddlewareChain(middlewares)
        self.retry_engine = RetryEngine(self._send, sleep or asyncio.sleep)

        logger.info(
            "HTTP client initialized",
            server_url=self.configuration.server_url,
            timeout=self.configuration.timeout,
            middlewares=[type(m).__name__ for m in self.middlewares],
        )

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._session is None or self._session.is_closed:
            self._session = httpx.AsyncClient(
                timeout=httpx.Timeout(self.configuration.timeout),
                follow_redirects=True,
            )
            self._owns_session = True
            logger.debug("Created new httpx AsyncClient")
        return self._session

    # === Middleware ===

    def add_middleware(self, middleware: HTTPMiddleware) -> None:
        self.middlewares.add(middleware)

    def clear_middlewares(self) -> None:
        self.middlewares.clear()

    # === Public API ===

    @overload
    async def send_request(
        self, request: HTTPRequest, response_type: type[T], *, cancellation: Optional[asyncio.Event] = None
    ) -> T: ...

    @overload
    async def send_request(
        self, request: HTTPRequest, response_type: None = None, *, cancellation: Optional[asyncio.Event] = None
    ) -> None: ...

    async def send_request(self, request, response_type=None, *, cancellation=None):
        """
        Send `request` through the pipeline and decode the result.

        Args:
            request: Request descriptor (one instance per logical call)
            response_type: Type to decode the payload into; None skips decoding
            cancellation: Optional event; once set, no further attempt reaches the transport

        Returns:
            The decoded payload, or None when `response_type` is None

        Raises:
            RequestCancelledError: Cancelled before a transport call or recovery action
            TransportError: Connection or timeout failure not recovered by middleware
            APIError / InvalidErrorFormatError: Status outside the valid range
            MaxRetryAttemptsReached: Retry budget spent
            DecodingError: Payload does not match `response_type`
        """
        response = await self.fetch_response(request, cancellation=cancellation)
        if response_type is None:
            return None
        return decode(response_type, response.content, request.decoding_key_path)

    async def fetch_response(
        self, request: HTTPRequest, *, cancellation: Optional[asyncio.Event] = None
    ) -> HTTPResponse:
        """Send `request` and return the validated response without decoding it."""
        return await self._send(RequestContext(request=request, cancellation=cancellation))

    # === Pipeline ===

    async def _send(self, context: RequestContext) -> HTTPResponse:
        while True:
            processed_request = self.middlewares.process_request(context.request)
            response = await self._fetch(processed_request, context)
            outcome = await self.validate(response)
            if isinstance(outcome, HTTPResponse):
                return outcome
            context = outcome

    async def _fetch(self, request: HTTPRequest, context: RequestContext) -> HTTPResponse:
        check_cancellation(context)
        transport_request = build_transport_request(request, self.configuration)

        start_time = time.perf_counter()
        try:
            raw = await self.session.send(transport_request)
        except httpx.TimeoutException as e:
            http_requests_total.labels(method=request.method.value, outcome="timeout").inc()
            logger.warning(
                "Request timeout",
                method=request.method.value,
                url=str(transport_request.url),
                timeout=self.configuration.timeout,
                retry_count=context.retry_count,
            )
            return self._failed_response(
                request,
                context,
                transport_request,
                TransportTimeoutError(
                    f"Request timeout after {self.configuration.timeout}s",
                    details={"url": str(transport_request.url), "error_type": type(e).__name__},
                ),
            )
        except httpx.TransportError as e:
            http_requests_total.labels(method=request.method.value, outcome="transport_error").inc()
            logger.warning(
                "Network error",
                method=request.method.value,
                url=str(transport_request.url),
                error=str(e),
                retry_count=context.retry_count,
            )
            return self._failed_response(
                request,
                context,
                transport_request,
                TransportError(
                    f"Network error: {e}",
                    details={"url": str(transport_request.url), "error_type": type(e).__name__},
                ),
            )

        elapsed = time.perf_counter() - start_time
        http_requests_total.labels(method=request.method.value, outcome="response").inc()
        http_request_latency_seconds.labels(method=request.method.value).observe(elapsed)

        return HTTPResponse(
            request=request,
            context=context,
            status_code=raw.status_code,
            headers=raw.headers,
            content=raw.content,
            url=str(raw.url),
            elapsed_ms=int(elapsed * 1000),
        )

    @staticmethod
    def _failed_response(
        request: HTTPRequest,
        context: RequestContext,
        transport_request: httpx.Request,
        error: TransportError,
    ) -> HTTPResponse:
        return HTTPResponse(
            request=request,
            context=context,
            status_code=None,
            url=str(transport_request.url),
            error=error,
        )

    async def validate(self, response: HTTPResponse) -> HTTPResponse | RequestContext:
        """
        Run response middleware and status validation for one attempt.

        Returns the validated response, or the context of the next attempt
        when middleware asked for a retry. Fallback requests skip response
        middleware so a recovery request can never start a retry cycle of
        its own.
        """
        if response.request.is_fallback_request:
            return self._check_status(response)

        result = self.middlewares.process_response(response)

        if isinstance(result, Success):
            return self._check_status(result.response)

        if isinstance(result, Fail):
            response.attach_error(result.error)
            raise result.error

        if isinstance(result, Retry):
            next_context = await self.retry_engine.perform_retry(result.method, response)
            if next_context is None:
                # Recovery failed: surface the original failure, never success.
                error = response.error or self._status_error(response)
                response.attach_error(error)
                raise error
            return next_context

        raise TypeError(f"Unsupported middleware result: {type(result).__name__}")

    def _check_status(self, response: HTTPResponse) -> HTTPResponse:
        if response.is_transport_failure:
            raise response.error

        if self.configuration.is_valid_status_code(response.status_code):
            return response

        logger.warning(
            "Request failed",
            method=response.request.method.value,
            url=response.url,
            status_code=response.status_code,
            response_body=response.text[:1000],
        )
        error = self._status_error(response)
        response.attach_error(error)
        raise error

    @staticmethod
    def _status_error(response: HTTPResponse) -> NetworkError:
        """APIError when the body is an error envelope, InvalidErrorFormatError otherwise."""
        try:
            envelope = decode(ErrorEnvelope, response.content)
        except NetworkError:
            return InvalidErrorFormatError(response.status_code, response.text)
        return APIError.from_envelope(envelope)

    # === Uploads ===

    async def upload(
        self,
        upload_request: UploadRequest,
        multipart: Multipart,
        upload_progress: Optional[ProgressCallback] = None,
        *,
        cancellation: Optional[asyncio.Event] = None,
    ) -> None:
        """
        POST `multipart` with the storage fields of `upload_request` to its URL.

        In-memory resources are sent as a single body; file resources are
        streamed with progress reports and the extended upload timeout.

        Raises:
            RequestCancelledError: Cancelled before the transport call
            TransportError: Connection or timeout failure
            APIError / InvalidErrorFormatError: Status outside the valid range
        """
        upload_context = RequestContext(
            request=HTTPRequest(method="POST", path=upload_request.url, requires_user_session=False),
            cancellation=cancellation,
        )
        check_cancellation(upload_context)

        encoder = MultipartEncoder(multipart, upload_request.fields)
        headers = {CONTENT_TYPE_HEADER: encoder.content_type}

        if isinstance(multipart.resource, DataResource):
            content = encoder.encode()
            timeout = self.configuration.timeout
            content_length = len(content)
        else:
            content = encoder.stream(upload_progress)
            timeout = self.configuration.upload_timeout
            content_length = content.content_length
        headers["Content-Length"] = str(content_length)

        logger.info(
            "Uploading multipart",
            url=upload_request.url,
            file_name=multipart.file_name,
            scope=multipart.upload_scope.value,
            content_length=content_length,
            streamed=not isinstance(multipart.resource, DataResource),
        )

        transport_request = httpx.Request(
            "POST",
            upload_request.url,
            headers=headers,
            content=content,
            extensions={"timeout": httpx.Timeout(timeout).as_dict()},
        )

        try:
            raw = await self.session.send(transport_request)
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                f"Upload timeout after {timeout}s",
                details={"url": upload_request.url, "error_type": type(e).__name__},
            )
        except httpx.TransportError as e:
            raise TransportError(
                f"Upload failed: {e}",
                details={"url": upload_request.url, "error_type": type(e).__name__},
            )

        upload_bytes_total.labels(scope=multipart.upload_scope.value).inc(content_length)
        if isinstance(multipart.resource, DataResource) and upload_progress is not None:
            upload_progress(1.0)

        self._check_status(
            HTTPResponse(
                request=upload_context.request,
                context=upload_context,
                status_code=raw.status_code,
                headers=raw.headers,
                content=raw.content,
                url=str(raw.url),
            )
        )

    # === Lifecycle ===

    async def close(self) -> None:
        """Close the HTTP client connection if this client created it."""
        if self._owns_session and self._session is not None and not self._session.is_closed:
            await self._session.aclose()
            logger.debug("Closed HTTP client connection")

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"server_url={self.configuration.server_url}, "
            f"middlewares={len(self.middlewares)})"
        )
