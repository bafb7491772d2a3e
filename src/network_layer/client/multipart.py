"""
multipart/form-data encoding for uploads.

Two paths share the same framing:
- in-memory data: the whole body is built as bytes
- file resources: MultipartFileStream yields the framing and streams the file
  in chunks, reporting progress as bytes are handed to the transport

Framing (B = boundary):
    \\r\\n--B\\r\\nContent-Disposition: form-data; name="<key>"\\r\\n\\r\\n<value>   (per field)
    \\r\\n--B\\r\\nContent-Disposition: form-data; name="file"; filename="<name>"\\r\\n
    Content-Type: <mime>\\r\\n\\r\\n<payload>
    \\r\\n--B--\\r\\n
"""

import asyncio
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Callable, Mapping, Optional

import structlog

from network_layer.models.upload import DataResource, FileResource, Multipart

logger = structlog.get_logger(__name__)

MULTIPART_CONTENT_TYPE = "multipart/form-data"
FILE_FIELD_NAME = "file"
STREAM_CHUNK_SIZE = 256 * 1024
_REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc).timestamp()

ProgressCallback = Callable[[float], None]

# Characters that would end a quoted Content-Disposition parameter or header line
_DISPOSITION_ESCAPES = str.maketrans({'"': "%22", "\r": "%0D", "\n": "%0A"})


def create_boundary() -> str:
    """
    Boundary token unique per upload.

    15 dashes, a lowercase uuid4 without dashes and the whole seconds elapsed
    since 2001-01-01 UTC.
    """
    seconds = int(time.time() - _REFERENCE_DATE)
    return "-" * 15 + uuid.uuid4().hex + str(seconds)


def content_type_header(boundary: str) -> str:
    return f"{MULTIPART_CONTENT_TYPE}; boundary={boundary}"


def quote_disposition_value(value: str) -> str:
    """Percent-encode `"`, CR and LF for a quoted `name` or `filename` parameter."""
    return value.translate(_DISPOSITION_ESCAPES)


class MultipartEncoder:
    """
    Frames form fields and one file part for a single upload.

    The boundary is regenerated until it collides with neither the payload
    bytes nor any field value. File resources are streamed from disk and are
    not read up front, so for them only the field values are checked; the
    uuid4 part of the boundary makes a match inside the file improbable.
    """

    def __init__(
        self,
        multipart: Multipart,
        fields: Mapping[str, str],
        boundary_factory: Callable[[], str] = create_boundary,
    ):
        self.multipart = multipart
        self.fields = dict(fields)
        self._boundary_factory = boundary_factory
        self.boundary = self._unique_boundary()

    @property
    def content_type(self) -> str:
        return content_type_header(self.boundary)

    def _unique_boundary(self) -> str:
        payload = self.multipart.resource.data if isinstance(self.multipart.resource, DataResource) else b""
        boundary = self._boundary_factory()
        while self._collides(boundary, payload):
            logger.debug("Multipart boundary collision, regenerating")
            boundary = self._boundary_factory()
        return boundary

    def _collides(self, boundary: str, payload: bytes) -> bool:
        encoded = boundary.encode("utf-8")
        if encoded in payload:
            return True
        return any(boundary in key or boundary in value for key, value in self.fields.items())

    def fields_section(self) -> bytes:
        parts = []
        for key, value in self.fields.items():
            parts.append(
                f"\r\n--{self.boundary}\r\n"
                f'Content-Disposition: form-data; name="{quote_disposition_value(key)}"\r\n\r\n'
                f"{value}"
            )
        return "".join(parts).encode("utf-8")

    def file_part_header(self) -> bytes:
        file_name = quote_disposition_value(self.multipart.file_name)
        return (
            f"\r\n--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{FILE_FIELD_NAME}"; filename="{file_name}"\r\n'
            f"Content-Type: {self.multipart.mime_type.value}\r\n\r\n"
        ).encode("utf-8")

    def closing_boundary(self) -> bytes:
        return f"\r\n--{self.boundary}--\r\n".encode("utf-8")

    def preamble(self) -> bytes:
        """Everything before the payload bytes."""
        return self.fields_section() + self.file_part_header()

    def encode(self) -> bytes:
        """
        Whole body for an in-memory resource.

        Raises:
            TypeError: The resource is a file (use `stream()`)
        """
        resource = self.multipart.resource
        if not isinstance(resource, DataResource):
            raise TypeError("encode() requires a DataResource; stream file resources")
        return self.preamble() + resource.data + self.closing_boundary()

    def stream(self, progress: Optional[ProgressCallback] = None) -> "MultipartFileStream":
        resource = self.multipart.resource
        if not isinstance(resource, FileResource):
            raise TypeError("stream() requires a FileResource")
        return MultipartFileStream(self, resource.path, progress)


class MultipartFileStream:
    """
    Async byte stream of a multipart body whose file part is read from disk.

    File reads run in a worker thread. `content_length` is exact, so the
    transport sends a Content-Length instead of chunked encoding.
    """

    def __init__(
        self,
        encoder: MultipartEncoder,
        path: Path,
        progress: Optional[ProgressCallback] = None,
        chunk_size: int = STREAM_CHUNK_SIZE,
    ):
        self.encoder = encoder
        self.path = path
        self.progress = progress
        self.chunk_size = chunk_size
        self._preamble = encoder.preamble()
        self._closing = encoder.closing_boundary()
        self.content_length = len(self._preamble) + path.stat().st_size + len(self._closing)
        self.bytes_sent = 0

    def _report(self, chunk: bytes) -> None:
        self.bytes_sent += len(chunk)
        if self.progress is not None and self.content_length:
            self.progress(min(self.bytes_sent / self.content_length, 1.0))

    async def __aiter__(self) -> AsyncIterator[bytes]:
        self.bytes_sent = 0
        yield self._preamble
        self._report(self._preamble)

        with self.path.open("rb") as file:
            while True:
                chunk = await asyncio.to_thread(file.read, self.chunk_size)
                if not chunk:
                    break
                yield chunk
                self._report(chunk)

        yield self._closing
        self._report(self._closing)
