"""
Upload descriptors for multipart uploads to presigned storage URLs.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from network_layer.models.enums import MimeType, UploadScope


class UploadKeys:
    """Field names used when registering an upload with the backend."""

    FILE_NAME = "name"
    UPLOAD_SCOPE = "scope"
    MIME_TYPE = "mimetype"
    OWNER = "owner"


@dataclass(frozen=True)
class DataResource:
    """In-memory payload."""

    data: bytes


@dataclass(frozen=True)
class FileResource:
    """Payload streamed from a file on disk."""

    path: Path

    @property
    def size(self) -> int:
        return self.path.stat().st_size


UploadResource = Union[DataResource, FileResource]


@dataclass(frozen=True)
class Multipart:
    """
    One upload: the resource, its target file name and its scope.

    Constructed by the caller per upload and consumed once.
    """

    resource: UploadResource
    file_name: str
    upload_scope: UploadScope
    owner: Optional[str] = None

    @property
    def mime_type(self) -> MimeType:
        return self.upload_scope.mime_type

    def registration_fields(self) -> dict[str, str]:
        """Body parameters announcing this upload to the backend."""
        fields = {
            UploadKeys.FILE_NAME: self.file_name,
            UploadKeys.MIME_TYPE: self.mime_type.value,
            UploadKeys.UPLOAD_SCOPE: self.upload_scope.value,
        }
        if self.owner is not None:
            fields[UploadKeys.OWNER] = self.owner
        return fields


class UploadRequest(BaseModel):
    """Presigned upload target returned by the backend."""

    url: str = Field(..., description="Absolute URL the multipart body is posted to")
    fields: dict[str, str] = Field(default_factory=dict, description="Form fields required by the storage")
