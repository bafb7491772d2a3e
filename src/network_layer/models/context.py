"""
Per-attempt state for one logical call.

A RequestContext is created when a caller sends an HTTPRequest and is
replaced (never mutated) every time the retry engine resubmits it.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Optional

from network_layer.models.request import HTTPRequest


@dataclass(frozen=True)
class RequestContext:
    """
    Attempt state for an HTTPRequest.

    Attributes:
        request: The unprocessed request descriptor (middleware is reapplied per attempt)
        retry_count: Resubmissions performed so far (0 for the first attempt)
        cancellation: Optional event; once set, no further transport call is made
    """

    request: HTTPRequest
    retry_count: int = 0
    cancellation: Optional[asyncio.Event] = None

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError("retry_count must be >= 0")

    @property
    def can_retry(self) -> bool:
        return self.retry_count < self.request.max_retry_count

    @property
    def is_fallback(self) -> bool:
        return self.request.is_fallback_request

    @property
    def is_cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.is_set()

    def next_attempt(self) -> "RequestContext":
        """Context for the next resubmission of the same request."""
        return replace(self, retry_count=self.retry_count + 1)
