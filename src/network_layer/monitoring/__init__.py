"""Monitoring and metrics instrumentation for the Network Layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from network_layer.monitoring.metrics import (
    http_request_latency_seconds,
    http_requests_total,
    recovery_failures_total,
    retries_total,
    upload_bytes_total,
)

__all__ = [
    "http_requests_total",
    "http_request_latency_seconds",
    "retries_total",
    "recovery_failures_total",
    "upload_bytes_total",
]
