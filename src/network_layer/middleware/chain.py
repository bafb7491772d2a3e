"""Ordered middleware chain."""

from typing import Iterable, Iterator

import structlog

from network_layer.middleware.base import HTTPMiddleware, ProcessingResult, Success
from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse

logger = structlog.get_logger(__name__)


class MiddlewareChain:
    """
    Ordered list of middleware, assembled once while the client is set up.

    Request phase: every opted-in middleware sees the output of the previous one.
    Response phase: short-circuits on the first Fail or Retry verdict.
    """

    def __init__(self, middlewares: Iterable[HTTPMiddleware] = ()):
        self._middlewares: list[HTTPMiddleware] = list(middlewares)

    def add(self, middleware: HTTPMiddleware) -> None:
        self._middlewares.append(middleware)
        logger.debug("Middleware added", middleware=type(middleware).__name__, position=len(self._middlewares))

    def clear(self) -> None:
        self._middlewares = []

    def __len__(self) -> int:
        return len(self._middlewares)

    def __iter__(self) -> Iterator[HTTPMiddleware]:
        return iter(self._middlewares)

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        for middleware in self._middlewares:
            if middleware.should_process_request(request):
                request = middleware.process_request(request)
        return request

    def process_response(self, response: HTTPResponse) -> ProcessingResult:
        for middleware in self._middlewares:
            if not middleware.should_process_response(response):
                continue

            result = middleware.process_response(response)
            if not isinstance(result, Success):
                logger.debug(
                    "Middleware short-circuited response",
                    middleware=type(middleware).__name__,
                    verdict=type(result).__name__,
                    path=response.request.path,
                )
                return result
            response = result.response

        return Success(response)
