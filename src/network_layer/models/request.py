"""
Request descriptor for one logical backend call.

HTTPRequest is immutable: middleware that needs to change a request returns
a modified copy. Per-attempt state (retry counter, cancellation) lives in
RequestContext, so one descriptor can be resubmitted safely.
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from network_layer.config import settings
from network_layer.models.enums import HTTPMethod, ParameterEncoding


class HTTPRequest(BaseModel):
    """
    Description of a single backend call, shared by all of its retries.

    Domain services build one instance per logical call with a path,
    parameters and an optional decoding key path into the response envelope.
    """
    model_config = ConfigDict(frozen=True)

    method: HTTPMethod = Field(..., description="HTTP verb")
    path: str = Field(..., description="Path relative to the configured server URL")
    query_parameters: Optional[dict[str, Any]] = Field(
        default=None,
        description="Query parameters; None values are omitted from the URL"
    )
    body_parameters: Optional[dict[str, Any]] = Field(
        default=None,
        description="Body parameters, serialized according to `encoding` (ignored for GET)"
    )
    headers: dict[str, str] = Field(default_factory=dict, description="Request-specific headers")
    encoding: ParameterEncoding = Field(default=ParameterEncoding.JSON)
    decoding_key_path: Optional[str] = Field(
        default=None,
        description="Dot-separated path to the payload inside the response envelope (e.g. 'data.items')"
    )
    max_retry_count: int = Field(
        default_factory=lambda: settings.DEFAULT_MAX_RETRY_COUNT,
        ge=0,
        description="Maximum resubmissions for this call",
    )
    is_fallback_request: bool = Field(
        default=False,
        description="Recovery request issued by the retry engine; skips response middleware"
    )
    requires_user_session: bool = Field(
        default=True,
        description="Advisory flag for middleware (attach auth headers, refresh on 401/403)"
    )

    def with_headers(self, headers: Mapping[str, str]) -> "HTTPRequest":
        """Return a copy with `headers` merged over the current headers."""
        return self.model_copy(update={"headers": {**self.headers, **headers}})

    def as_fallback(self) -> "HTTPRequest":
        """Return a copy flagged as a fallback (recovery) request."""
        return self.model_copy(update={"is_fallback_request": True})

    def __repr__(self) -> str:
        return f"HTTPRequest(method={self.method.value}, path={self.path})"
