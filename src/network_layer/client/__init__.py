"""
HTTP client and transport-side helpers.

Components:
- HTTPClient: Pipeline orchestrator (middleware, validation, retries, uploads)
- HTTPClientConfiguration: Server URL, default headers, status range, timeouts
- build_transport_request: HTTPRequest -> httpx.Request
- MultipartEncoder / MultipartFileStream: multipart/form-data framing
"""

from network_layer.client.configuration import HTTPClientConfiguration
from network_layer.client.http_client import HTTPClient
from network_layer.client.multipart import (
    MultipartEncoder,
    MultipartFileStream,
    create_boundary,
)
from network_layer.client.request_builder import (
    build_transport_request,
    query_components,
)

__all__ = [
    "HTTPClient",
    "HTTPClientConfiguration",
    "build_transport_request",
    "query_components",
    "MultipartEncoder",
    "MultipartFileStream",
    "create_boundary",
]
