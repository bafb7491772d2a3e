"""
Custom exceptions for the network layer.

These exceptions provide structured error handling for the request pipeline,
allowing middleware and the retry engine to distinguish between transport
failures, rejected statuses, exhausted retry budgets and malformed payloads.
"""

import asyncio
from typing import Any, Optional

from pydantic import BaseModel, Field


class NetworkError(Exception):
    """
    Base exception for all network layer errors.

    All pipeline-specific exceptions inherit from this to allow catching
    any backend failure with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(NetworkError):
    """
    Raised when the request never produced an HTTP response.

    Includes connection refused, DNS failures, dropped connections, etc.
    Eligible for retry through middleware.
    """
    pass


class TransportTimeoutError(TransportError):
    """Raised when a transport attempt exceeds its timeout."""
    pass


class ErrorEnvelope(BaseModel):
    """Structured error body returned by the backend for rejected statuses."""

    status: int
    message: str
    code: Optional[str] = None
    errors: Optional[list[str]] = Field(default=None)


class APIError(NetworkError):
    """
    Raised when the backend rejects a request with a structured error body.

    Attributes:
        status_code: Status reported by the error envelope
        error_code: Machine-readable error code (e.g. "AppVersionUnsupported")
        errors: Optional list of human-readable error messages
    """

    APP_VERSION_UNSUPPORTED = "AppVersionUnsupported"
    FORCE_UPDATE_STATUS = 409

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: str | None = None,
        errors: list[str] | None = None,
    ):
        super().__init__(
            message,
            details={"status_code": status_code, "error_code": error_code, "errors": errors},
        )
        self.status_code = status_code
        self.error_code = error_code
        self.errors = errors

    @classmethod
    def from_envelope(cls, envelope: ErrorEnvelope) -> "APIError":
        return cls(
            envelope.message,
            status_code=envelope.status,
            error_code=envelope.code,
            errors=envelope.errors,
        )

    @property
    def description(self) -> str:
        """First detailed error if present, otherwise the envelope message."""
        if self.errors:
            return self.errors[0]
        return self.message

    @property
    def is_app_version_unsupported(self) -> bool:
        return (
            self.status_code == self.FORCE_UPDATE_STATUS
            and self.error_code == self.APP_VERSION_UNSUPPORTED
        )

    def __str__(self) -> str:
        return self.description


class InvalidErrorFormatError(NetworkError):
    """
    Raised when a rejected response carries a body that is not an error envelope.
    """

    def __init__(self, status_code: int | None, body_snippet: str | None = None):
        details: dict[str, Any] = {"status_code": status_code}
        if body_snippet:
            details["body_snippet"] = body_snippet[:500]
        super().__init__("We have encountered an unexpected error", details)
        self.status_code = status_code


class MaxRetryAttemptsReached(NetworkError):
    """
    Raised when a middleware asks for a retry but the request budget is spent.

    Terminal: never downgraded into another retry.
    """

    def __init__(self, retry_count: int, max_retry_count: int, path: str | None = None):
        super().__init__(
            "Maximum retry attempts have been reached.",
            details={
                "retry_count": retry_count,
                "max_retry_count": max_retry_count,
                "path": path,
            },
        )
        self.retry_count = retry_count
        self.max_retry_count = max_retry_count


class DecodingError(NetworkError):
    """
    Raised when a response body (or the sub-document at the decoding key path)
    does not match the requested type.

    Never retried automatically.
    """

    def __init__(self, message: str, key_path: str | None = None, details: dict | None = None):
        merged = dict(details or {})
        if key_path is not None:
            merged["key_path"] = key_path
        super().__init__(message, merged)
        self.key_path = key_path


class InvalidUserSessionError(NetworkError):
    """Raised when a session refresh is needed but no refresh token is available."""

    def __init__(self, message: str = "The user is not authenticated"):
        super().__init__(message)


class RequestCancelledError(asyncio.CancelledError):
    """
    Raised when a request is cancelled before it reaches the transport.

    Subclasses asyncio.CancelledError so cancellation stays a distinct outcome
    and is never caught by handlers for NetworkError.
    """
    pass
