"""
Transport result for one attempt of a request.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar

import httpx

from network_layer import decoding
from network_layer.models.context import RequestContext
from network_layer.models.request import HTTPRequest

T = TypeVar("T")


@dataclass
class HTTPResponse:
    """
    Raw result of one transport attempt plus lazy decoding.

    `request` is the request as it was sent (after request middleware);
    `context` carries the attempt state of the original descriptor.
    `status_code` is None when the transport failed, in which case `error`
    holds the TransportError from construction on.

    `error` is otherwise attached at most once, by response validation.
    """

    request: HTTPRequest
    context: RequestContext
    status_code: Optional[int]
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""
    url: Optional[str] = None
    elapsed_ms: int = 0
    error: Optional[Exception] = None

    @property
    def is_transport_failure(self) -> bool:
        return self.status_code is None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return decoding.parse_json(self.content)

    def attach_error(self, error: Exception) -> None:
        """Record the validation outcome; the first attached error wins."""
        if self.error is None:
            self.error = error

    def decoded(self, type_: type[T], key_path: Optional[str] = None) -> T:
        """
        Decode the body into `type_`.

        Uses `key_path` when given, otherwise the request's decoding_key_path.

        Raises:
            DecodingError: Body or key-path sub-document does not match `type_`
        """
        return decoding.decode(type_, self.content, key_path or self.request.decoding_key_path)

    def __repr__(self) -> str:
        return (
            f"HTTPResponse(status_code={self.status_code}, "
            f"path={self.request.path}, retry_count={self.context.retry_count})"
        )
