"""Format capability tables.

Fallback behaviour is data, not branches: ``FORMAT_FALLBACKS`` maps a
requested format to the format used when the engine cannot encode it.
"""

from .errors import UnsupportedFormatError

FORMAT_ALIASES: dict[str, str] = {
    "jpg": "jpeg",
    "tif": "tiff",
}

FORMAT_FALLBACKS: dict[str, str] = {
    "avif": "png",
    "webp": "png",
    "gif": "png",
    "tiff": "png",
}

PIL_FORMATS: dict[str, str] = {
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "avif": "AVIF",
    "gif": "GIF",
    "tiff": "TIFF",
}

FORMAT_MIME_TYPES: dict[str, str] = {
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "avif": "image/avif",
    "gif": "image/gif",
    "tiff": "image/tiff",
}

MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/avif": "avif",
    "image/gif": "gif",
    "image/tiff": "tif",
}

# Formats whose encoder can keep every frame of an animated source
MULTI_FRAME_FORMATS: frozenset[str] = frozenset({"gif", "webp", "png", "tiff"})

RESIZABLE_MIME_TYPES: frozenset[str] = frozenset(
    {"image/png", "image/jpeg", "image/jpg", "image/webp", "image/gif"}
)


def normalize_format(format: str) -> str:
    fmt = format.lower().lstrip(".")
    return FORMAT_ALIASES.get(fmt, fmt)


def resolve_format(requested: str, supported: frozenset[str] | set[str]) -> tuple[str, bool]:
    """Map a requested format onto one the engine can encode.

    Returns:
        ``(actual_format, substituted)``

    Raises:
        UnsupportedFormatError: If neither the format nor its fallback is supported
    """
    fmt = normalize_format(requested)
    if fmt in supported:
        return fmt, False

    fallback = FORMAT_FALLBACKS.get(fmt)
    if fallback is not None and fallback in supported:
        return fallback, True

    raise UnsupportedFormatError(requested, supported)


def get_pil_format(format: str) -> str:
    """Convert a format string to the Pillow format name."""
    fmt = normalize_format(format)
    return PIL_FORMATS.get(fmt, fmt.upper())


def mime_type_for_format(format: str) -> str | None:
    return FORMAT_MIME_TYPES.get(normalize_format(format))


def extension_for_mime_type(mime_type: str) -> str | None:
    return MIME_EXTENSIONS.get(mime_type.lower())


def can_resize_image(mime_type: str) -> bool:
    return mime_type.lower() in RESIZABLE_MIME_TYPES
