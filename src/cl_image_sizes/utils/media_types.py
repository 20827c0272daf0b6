from enum import StrEnum
from io import BytesIO

import magic


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    FILE = "file"

    @classmethod
    def from_mime(cls, file_type: str) -> "MediaType":
        if file_type.startswith("image"):
            return MediaType.IMAGE
        elif file_type.startswith("video"):
            return MediaType.VIDEO
        elif file_type.startswith("audio"):
            return MediaType.AUDIO
        elif file_type.startswith("text"):
            return MediaType.TEXT
        else:
            return MediaType.FILE


def sniff_mime_type(bytes_io: BytesIO) -> str:
    """Mime type from content, "application/octet-stream" when unknown."""
    _ = bytes_io.seek(0)
    mime = magic.Magic(mime=True)
    file_type = mime.from_buffer(bytes_io.getvalue())
    if not file_type:
        file_type = "application/octet-stream"
    # libmagic reports SVG as XML
    if file_type in ("application/xml", "text/xml") and b"<svg" in bytes_io.getvalue()[:1024]:
        file_type = "image/svg+xml"
    return file_type


def determine_mime(bytes_io: BytesIO, file_type: str | None = None) -> MediaType:
    if not file_type:
        file_type = sniff_mime_type(bytes_io)
    return MediaType.from_mime(file_type)
