"""
RasterEngine Protocol - interface to the pixel decoding/resampling/encoding backend.

Design goals:
- Keep every geometry decision outside the engine
- Header-only probing for dimensions
- One terminal ``materialize`` call driven by an immutable PendingOperations value
"""

from __future__ import annotations

from typing import Callable, Generic, Protocol, TypeVar, runtime_checkable

from ..algo.dimension_calculator import calculate_dimensions, frame_height
from .schema_image import (
    CropWindow,
    EncodedImage,
    ImageDimensions,
    PendingOperations,
    ProbedImage,
    RasterInfo,
    TrimOptions,
)

ImageT = TypeVar("ImageT")


@runtime_checkable
class RasterEngine(Protocol, Generic[ImageT]):
    """
    Protocol for raster engines.

    Implementations own:
    - decoding and encoding
    - resampling kernels
    - frame handling of animated images

    All methods are synchronous and may be called from worker threads;
    images are never shared between callers.
    """

    @property
    def supported_formats(self) -> frozenset[str]:
        """Formats this engine can encode (normalized names, e.g. "jpeg")."""
        ...

    def probe(self, data: bytes) -> ProbedImage:
        """
        Read dimensions and frame count from the header only.

        Raises:
            DecodeFailureError: If the bytes are not a readable image
        """
        ...

    def decode(self, data: bytes) -> ImageT:
        """
        Decode all frames.

        Raises:
            DecodeFailureError: If the bytes are not a readable image
        """
        ...

    def info(self, image: ImageT) -> RasterInfo:
        """True geometry of a decoded image, frames stacked."""
        ...

    def resize(self, image: ImageT, width: int, height: int) -> ImageT:
        """Resample every frame to exactly width x height."""
        ...

    def crop(self, image: ImageT, window: CropWindow) -> ImageT:
        """
        Extract a window from every frame.

        Raises:
            InvalidRegionError: If the window does not lie within a frame
        """
        ...

    def trim(self, image: ImageT, options: TrimOptions) -> ImageT:
        """Remove uniform borders."""
        ...

    def encode(
        self,
        image: ImageT,
        format: str | None = None,
        options: dict[str, object] | None = None,
    ) -> EncodedImage:
        """
        Encode to bytes. ``format`` None keeps the source format when possible.

        Raises:
            UnsupportedFormatError: If the format cannot be encoded
        """
        ...


def frame_dimensions(engine: RasterEngine[ImageT], image: ImageT) -> ImageDimensions:
    """Dimensions of one frame as reported by the engine."""
    info = engine.info(image)
    return ImageDimensions(width=info.width, height=frame_height(info.height, info.pages))


def materialize(
    engine: RasterEngine[ImageT],
    image: ImageT,
    operations: PendingOperations,
    checkpoint: Callable[[], None] | None = None,
) -> EncodedImage:
    """
    Apply resize, extract, trim and format in that order and encode.

    Args:
        engine: Raster engine owning ``image``
        image: Decoded image; not reused by the caller afterwards
        operations: Operations to apply
        checkpoint: Called before every step; raises to abandon the work

    Returns:
        EncodedImage with the engine-reported geometry
    """
    step = checkpoint or (lambda: None)

    step()
    if operations.resize is not None:
        target = calculate_dimensions(frame_dimensions(engine, image), operations.resize)
        image = engine.resize(image, target.width, target.height)

    step()
    if operations.extract is not None:
        image = engine.crop(image, operations.extract)

    step()
    if operations.trim is not None:
        image = engine.trim(image, operations.trim)

    step()
    if operations.format is not None:
        return engine.encode(image, operations.format.format, operations.format.options)

    return engine.encode(image)
