"""
Static configuration of an HTTPClient.
"""

import platform

from pydantic import BaseModel, ConfigDict, Field, model_validator

from network_layer.config import Settings, settings as default_settings


class HTTPClientConfiguration(BaseModel):
    """
    Server URL, default headers, accepted statuses and timeouts for a client.

    Applied to every request built by the client; request-specific headers
    override default headers with the same name.
    """
    model_config = ConfigDict(frozen=True)

    server_url: str = Field(..., description="Base URL every request path is appended to")
    http_headers: dict[str, str] = Field(default_factory=dict, description="Headers sent with every request")
    valid_status_min: int = Field(default=200, ge=100, le=599)
    valid_status_max: int = Field(default=299, ge=100, le=599)
    timeout: float = Field(default=30.0, gt=0, description="Per-attempt transport timeout in seconds")
    upload_timeout: float = Field(default=30 * 60, gt=0, description="Timeout for file-streamed uploads")

    @model_validator(mode="after")
    def _check_status_range(self) -> "HTTPClientConfiguration":
        if self.valid_status_min > self.valid_status_max:
            raise ValueError("valid_status_min must be <= valid_status_max")
        return self

    @property
    def valid_status_codes(self) -> range:
        """Closed range of accepted statuses."""
        return range(self.valid_status_min, self.valid_status_max + 1)

    def is_valid_status_code(self, status_code: int) -> bool:
        return status_code in self.valid_status_codes

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "HTTPClientConfiguration":
        """Default configuration built from environment settings."""
        settings = settings or default_settings
        return cls(
            server_url=settings.SERVER_URL,
            http_headers={"App-Agent": app_agent(settings)},
            valid_status_min=settings.VALID_STATUS_MIN,
            valid_status_max=settings.VALID_STATUS_MAX,
            timeout=settings.REQUEST_TIMEOUT,
            upload_timeout=settings.UPLOAD_TIMEOUT,
        )


def app_agent(settings: Settings) -> str:
    """App-Agent header value, e.g. "python 3.12 APP/0.1.0"."""
    return f"{settings.PLATFORM} {platform.python_version()} {settings.APP_NAME}/{settings.APP_VERSION}"
