"""
Middleware protocol and response verdicts.

A middleware participates in two phases, each gated by its own predicate:
- request phase: may return a modified copy of the outgoing request
- response phase: returns a ProcessingResult verdict for the response

Any class implementing the four methods of HTTPMiddleware can be added to
an HTTPClient.
"""

from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse
from network_layer.retry.strategies import RetryMethod


@dataclass(frozen=True)
class Success:
    """Accept the (possibly transformed) response and pass it on."""

    response: HTTPResponse


@dataclass(frozen=True)
class Fail:
    """Fail the call with `error`; remaining middleware is skipped."""

    error: Exception


@dataclass(frozen=True)
class Retry:
    """Ask the retry engine to execute `method`; remaining middleware is skipped."""

    method: RetryMethod


ProcessingResult = Union[Success, Fail, Retry]


@runtime_checkable
class HTTPMiddleware(Protocol):
    """Interceptor for outgoing requests and incoming responses."""

    def should_process_request(self, request: HTTPRequest) -> bool:
        ...

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        ...

    def should_process_response(self, response: HTTPResponse) -> bool:
        ...

    def process_response(self, response: HTTPResponse) -> ProcessingResult:
        ...
