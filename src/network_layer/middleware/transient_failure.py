"""
Retry transient failures with exponential backoff.

Transport failures (connection errors, timeouts) and gateway statuses
(502/503/504) are answered with a Delayed retry. The delay doubles per
attempt and honours a numeric Retry-After header.
"""

import structlog

from network_layer.config import settings
from network_layer.middleware.base import ProcessingResult, Retry
from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse
from network_layer.retry.strategies import Delayed

logger = structlog.get_logger(__name__)

TRANSIENT_STATUSES = frozenset({502, 503, 504})


class TransientFailureMiddleware:
    """
    Backoff retries for transport failures and gateway errors.

    Attributes:
        backoff_base: Exponential backoff multiplier (delay = base ** attempt)
        max_delay: Upper bound for a single delay, including Retry-After values
        retry_statuses: Statuses treated as transient
    """

    def __init__(
        self,
        backoff_base: float | None = None,
        max_delay: float | None = None,
        retry_statuses: frozenset[int] = TRANSIENT_STATUSES,
    ):
        self.backoff_base = settings.TRANSIENT_RETRY_BACKOFF_BASE if backoff_base is None else backoff_base
        self.max_delay = settings.TRANSIENT_RETRY_MAX_DELAY if max_delay is None else max_delay
        self.retry_statuses = retry_statuses

    def should_process_request(self, request: HTTPRequest) -> bool:
        return False

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        return request

    def should_process_response(self, response: HTTPResponse) -> bool:
        return response.is_transport_failure or response.status_code in self.retry_statuses

    def process_response(self, response: HTTPResponse) -> ProcessingResult:
        delay = self._retry_after(response)
        if delay is None:
            delay = self.backoff_base ** response.context.retry_count
        delay = min(delay, self.max_delay)

        logger.info(
            "Transient failure, scheduling retry",
            path=response.request.path,
            status_code=response.status_code,
            error_type=type(response.error).__name__ if response.error else None,
            delay_seconds=delay,
        )
        return Retry(Delayed(delay))

    @staticmethod
    def _retry_after(response: HTTPResponse) -> float | None:
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            return max(float(value), 0.0)
        except ValueError:
            # HTTP-date form is not supported; fall back to backoff
            return None
