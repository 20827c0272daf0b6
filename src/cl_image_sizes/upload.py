"""Main-file processing of an upload: adjustments and the upload-edit crop."""

from typing import Any, ClassVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .algo.dimension_calculator import frame_height
from .algo.upload_crop import plan_upload_crop
from .common.formats import resolve_format
from .common.raster_engine import RasterEngine, materialize
from .common.schema_image import (
    EncodedImage,
    FormatOptions,
    ImageDimensions,
    PendingOperations,
    ResizeRequest,
    UploadConfig,
    UploadEdits,
)
from .utils.profiling import timed


class ProcessedFile(BaseModel):
    """Bytes of the main file together with the geometry of one frame."""

    data: bytes = Field(..., repr=False)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0, description="Height of one frame")
    format: str | None = Field(default=None, description="Encoded format, None when untouched")
    format_substituted: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def filesize(self) -> int:
        return len(self.data)

    @property
    def dimensions(self) -> ImageDimensions:
        return ImageDimensions(width=self.width, height=self.height)

    @classmethod
    def from_encoded(cls, encoded: EncodedImage, *, substituted: bool = False) -> "ProcessedFile":
        return cls(
            data=encoded.data,
            width=encoded.width,
            height=frame_height(encoded.height, encoded.pages),
            format=encoded.format,
            format_substituted=substituted,
        )


def resolve_format_options(
    engine: RasterEngine[Any], options: FormatOptions | None
) -> tuple[FormatOptions | None, bool]:
    """Replace the requested format with the one the engine will write."""
    if options is None:
        return None, False
    actual, substituted = resolve_format(options.format, engine.supported_formats)
    if substituted:
        logger.warning(f"Format '{options.format}' not supported, writing '{actual}' instead")
    return options.model_copy(update={"format": actual}), substituted


def has_adjustments(config: UploadConfig) -> bool:
    return bool(config.resize_options or config.format_options or config.trim_options)


@timed
def adjust_upload(engine: RasterEngine[Any], data: bytes, config: UploadConfig) -> ProcessedFile:
    """Apply the collection-level resize, trim and format options to the main file."""
    format_options, substituted = resolve_format_options(engine, config.format_options)
    operations = PendingOperations(
        resize=config.resize_options,
        trim=config.trim_options,
        format=format_options,
    )
    encoded = materialize(engine, engine.decode(data), operations)
    return ProcessedFile.from_encoded(encoded, substituted=substituted)


@timed
def crop_upload(
    engine: RasterEngine[Any],
    data: bytes,
    dimensions: ImageDimensions,
    edits: UploadEdits,
) -> ProcessedFile:
    """
    Crop the source as requested by an upload edit.

    Args:
        engine: Raster engine
        data: Source bytes
        dimensions: Dimensions of one source frame
        edits: Upload edits carrying ``crop`` and the pixel size

    Returns:
        The cropped file, or the source untouched when the size did not change

    Raises:
        InvalidRegionError: If the crop leaves no pixels
    """
    window = plan_upload_crop(dimensions, edits)
    if window is None:
        return ProcessedFile(data=data, width=dimensions.width, height=dimensions.height)

    logger.debug(f"Cropping upload to {window.width}x{window.height}+{window.left}+{window.top}")
    encoded = materialize(engine, engine.decode(data), PendingOperations(extract=window))
    return ProcessedFile.from_encoded(encoded)


@timed
def resize_upload(
    engine: RasterEngine[Any], file: ProcessedFile, options: ResizeRequest
) -> ProcessedFile:
    """Resize an already cropped main file; a no-op with ``without_enlargement``."""
    if options.without_enlargement:
        return file
    encoded = materialize(engine, engine.decode(file.data), PendingOperations(resize=options))
    return ProcessedFile.from_encoded(encoded)
