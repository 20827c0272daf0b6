"""Common module - schemas, errors and format tables."""

from .errors import (
    DecodeFailureError,
    ImageSizesError,
    InvalidRegionError,
    UnsupportedFormatError,
    VariantCancelledError,
    VariantProcessingError,
)
from .schema_image import (
    CropWindow,
    FocalPoint,
    ImageDimensions,
    ImageSizesResult,
    UploadConfig,
    VariantResult,
    VariantSpec,
)

__all__ = [
    "CropWindow",
    "DecodeFailureError",
    "FocalPoint",
    "ImageDimensions",
    "ImageSizesError",
    "ImageSizesResult",
    "InvalidRegionError",
    "UnsupportedFormatError",
    "UploadConfig",
    "VariantCancelledError",
    "VariantProcessingError",
    "VariantResult",
    "VariantSpec",
]
