"""
Enumerations for Network Layer data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class HTTPMethod(str, Enum):
    """HTTP verbs supported by the backend API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ParameterEncoding(str, Enum):
    """
    Body serialization for requests carrying body parameters.

    The value is the Content-Type header sent with the body.
    """

    JSON = "application/json"
    URL_ENCODED = "application/x-www-form-urlencoded; charset=utf-8"

    @property
    def header_value(self) -> str:
        return self.value


class MimeType(str, Enum):
    """Content types accepted by the upload storage."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    MP4 = "video/mp4"
    QUICKTIME = "video/quicktime"


class UploadScope(str, Enum):
    """
    Named upload purposes.

    The scope selects the MIME type of the uploaded part (see
    UPLOAD_SCOPE_MIME_TYPES) and is sent to the backend when the upload
    is registered.
    """

    PROFILE_PICTURE = "profilePicture"
    BRAND_LOGO = "brandLogo"
    SHOW_THUMBNAIL = "showThumbnail"
    SHOW_VIDEO = "showVideo"
    SHOW_TEASER = "showTeaser"

    @property
    def mime_type(self) -> MimeType:
        return UPLOAD_SCOPE_MIME_TYPES[self]


UPLOAD_SCOPE_MIME_TYPES: dict[UploadScope, MimeType] = {
    UploadScope.PROFILE_PICTURE: MimeType.JPEG,
    UploadScope.BRAND_LOGO: MimeType.PNG,
    UploadScope.SHOW_THUMBNAIL: MimeType.JPEG,
    UploadScope.SHOW_VIDEO: MimeType.MP4,
    UploadScope.SHOW_TEASER: MimeType.MP4,
}
