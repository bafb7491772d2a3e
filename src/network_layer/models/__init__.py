"""
Data models for the Network Layer.

Exports:
- HTTPRequest: Immutable request descriptor
- RequestContext: Per-attempt state (retry counter, cancellation)
- HTTPResponse: Transport result with key-path decoding
- Multipart / UploadRequest: Multipart upload descriptors
- Enums: HTTPMethod, ParameterEncoding, UploadScope, MimeType
"""

from network_layer.models.context import RequestContext
from network_layer.models.enums import (
    UPLOAD_SCOPE_MIME_TYPES,
    HTTPMethod,
    MimeType,
    ParameterEncoding,
    UploadScope,
)
from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse
from network_layer.models.upload import (
    DataResource,
    FileResource,
    Multipart,
    UploadKeys,
    UploadRequest,
)

__all__ = [
    "HTTPRequest",
    "RequestContext",
    "HTTPResponse",
    "HTTPMethod",
    "ParameterEncoding",
    "UploadScope",
    "MimeType",
    "UPLOAD_SCOPE_MIME_TYPES",
    "Multipart",
    "DataResource",
    "FileResource",
    "UploadKeys",
    "UploadRequest",
]
