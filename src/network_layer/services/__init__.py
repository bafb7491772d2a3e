"""Backend services built on the HTTP client."""

from network_layer.services.upload_service import UploadService

__all__ = ["UploadService"]
