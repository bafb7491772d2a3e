"""
Middleware for the request pipeline.

Components:
- HTTPMiddleware: Protocol every middleware implements
- Success / Fail / Retry: Response-phase verdicts
- MiddlewareChain: Ordered chain with short-circuiting response phase
- UserSessionMiddleware: Bearer auth + single-flight token refresh
- TransientFailureMiddleware: Backoff retries for transport/gateway failures
- RequestTracingMiddleware: X-Request-ID header + response logging
"""

from network_layer.middleware.base import (
    Fail,
    HTTPMiddleware,
    ProcessingResult,
    Retry,
    Success,
)
from network_layer.middleware.chain import MiddlewareChain
from network_layer.middleware.request_tracing import RequestTracingMiddleware
from network_layer.middleware.transient_failure import TransientFailureMiddleware
from network_layer.middleware.user_session import (
    TokenPair,
    UserSession,
    UserSessionMiddleware,
)

__all__ = [
    "HTTPMiddleware",
    "ProcessingResult",
    "Success",
    "Fail",
    "Retry",
    "MiddlewareChain",
    "UserSessionMiddleware",
    "UserSession",
    "TokenPair",
    "TransientFailureMiddleware",
    "RequestTracingMiddleware",
]
