"""
Network Layer for backend communication.

Sends typed requests to the backend API and turns responses into domain values:
- Request construction (base URL, query flattening, default headers, JSON/form bodies)
- Middleware chain (request rewriting, response verdicts)
- Response validation and key-path decoding
- Retry engine with recovery actions (fallback requests, recovery tasks)
- Multipart uploads to presigned storage URLs

Architecture: httpx AsyncClient transport + pluggable middleware + pydantic decoding
"""

__version__ = "0.1.0"

from network_layer.logging_config import configure_logging

__all__ = ["configure_logging", "__version__"]
