"""Custom Prometheus metrics for the Network Layer.

These metrics are registered on the default prometheus_client registry and
exposed by whatever process embeds the client.
Alert rules should be configured for:
- http_requests_total{outcome="failed"} (backend error rate)
- retries_total (high retry rate indicates session churn or backend instability)
- recovery_failures_total (token refresh or recovery tasks failing)
"""

from prometheus_client import Counter, Histogram

# === Request Metrics ===

http_requests_total = Counter(
    "network_http_requests_total",
    "Total transport attempts by method and outcome",
    ["method", "outcome"],
)
"""
Transport attempts counter.

Labels:
- method: GET, POST, PUT, PATCH, DELETE
- outcome: response (any HTTP status received), transport_error, timeout
"""

http_request_latency_seconds = Histogram(
    "network_http_request_latency_seconds",
    "Transport attempt latency in seconds",
    ["method"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# === Retry Metrics ===

retries_total = Counter(
    "network_retries_total",
    "Total retry verdicts by strategy and outcome",
    ["strategy", "outcome"],
)
"""
Retry verdicts counter.

Labels:
- strategy: immediate, delayed, after_request, after_task
- outcome: resubmitted, recovery_failed, budget_exhausted
"""

recovery_failures_total = Counter(
    "network_recovery_failures_total",
    "Recovery actions (fallback requests, recovery tasks) that failed",
    ["strategy"],
)
"""
Recovery failures counter.

The caller only sees the original error when recovery fails; this counter
keeps the recovery failure observable.
"""

# === Upload Metrics ===

upload_bytes_total = Counter(
    "network_upload_bytes_total",
    "Multipart body bytes sent by upload scope",
    ["scope"],
)
