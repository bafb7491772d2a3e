"""
Upload service: registers an upload with the backend, then sends the file.

Flow:
1. POST v1/uploads with the file name, MIME type, scope and owner;
   the response's "upload" object is the presigned UploadRequest
2. Multipart POST of the resource to the presigned URL
"""

import asyncio
from typing import Optional

import structlog

from network_layer.client.http_client import HTTPClient
from network_layer.client.multipart import ProgressCallback
from network_layer.models.enums import HTTPMethod, ParameterEncoding
from network_layer.models.request import HTTPRequest
from network_layer.models.upload import Multipart, UploadRequest

logger = structlog.get_logger(__name__)

UPLOADS_PATH = "v1/uploads"
UPLOAD_KEY_PATH = "upload"


class UploadService:
    """Uploads media described by a Multipart through an HTTPClient."""

    def __init__(self, client: HTTPClient):
        self.client = client

    async def upload_data(
        self,
        multipart: Multipart,
        upload_progress: Optional[ProgressCallback] = None,
        *,
        cancellation: Optional[asyncio.Event] = None,
    ) -> UploadRequest:
        """
        Register and upload `multipart`.

        Returns:
            The UploadRequest the file was sent to
        """
        upload_request = await self.register_upload(multipart, cancellation=cancellation)
        await self.client.upload(upload_request, multipart, upload_progress, cancellation=cancellation)
        logger.info(
            "Upload completed",
            file_name=multipart.file_name,
            scope=multipart.upload_scope.value,
        )
        return upload_request

    async def register_upload(
        self, multipart: Multipart, *, cancellation: Optional[asyncio.Event] = None
    ) -> UploadRequest:
        request = HTTPRequest(
            method=HTTPMethod.POST,
            path=UPLOADS_PATH,
            body_parameters=multipart.registration_fields(),
            encoding=ParameterEncoding.JSON,
            decoding_key_path=UPLOAD_KEY_PATH,
        )
        return await self.client.send_request(request, UploadRequest, cancellation=cancellation)
