"""Pydantic models for image geometry, variant specs and variant results."""

from collections.abc import Callable
from enum import StrEnum
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Fit = Literal["cover", "contain", "fill", "inside", "outside"]
ImageFormat = Literal["jpeg", "jpg", "png", "webp", "avif", "gif", "tiff"]
Operation = Literal["create", "update", "duplicate"]


# ─────────────────────────────────────────────────────────────
# Geometry
# ─────────────────────────────────────────────────────────────


class ImageDimensions(BaseModel):
    """Pixel dimensions of a single frame."""

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class ProbedImage(BaseModel):
    """Header-only probe of an encoded image.

    `height` is the height of one frame; `pages` the number of frames.
    """

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    pages: int = Field(default=1, ge=1)
    format: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def dimensions(self) -> ImageDimensions:
        return ImageDimensions(width=self.width, height=self.height)


class RasterInfo(BaseModel):
    """Geometry of a decoded raster, frames stacked vertically."""

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0, description="Height of all frames stacked")
    pages: int = Field(default=1, ge=1)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class FocalPoint(BaseModel):
    """Percentage based anchor of the region that must survive a crop."""

    x: float = Field(default=50, ge=0, le=100, description="Horizontal position (percent)")
    y: float = Field(default=50, ge=0, le=100, description="Vertical position (percent)")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")


class CropWindow(BaseModel):
    """Pixel-space rectangle extracted from a (possibly pre-scaled) image."""

    left: int = Field(..., ge=0)
    top: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    def fits_within(self, bounds: ImageDimensions) -> bool:
        return (
            self.left + self.width <= bounds.width and self.top + self.height <= bounds.height
        )

    def as_box(self) -> tuple[int, int, int, int]:
        """Return (left, upper, right, lower) as expected by Pillow."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)


class FitAction(StrEnum):
    OMIT = "omit"
    RESIZE = "resize"
    RESIZE_WITH_FOCAL_POINT = "resize_with_focal_point"


# ─────────────────────────────────────────────────────────────
# Operations
# ─────────────────────────────────────────────────────────────


class ResizeRequest(BaseModel):
    """A normalized resize request.

    Both the legacy ``(width, height)`` form and the options form end up
    here, see :func:`normalize_resize_request`.
    """

    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    fit: Fit | None = None
    position: str | int | None = None
    without_enlargement: bool | None = None
    without_reduction: bool | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")


def normalize_resize_request(
    options: ResizeRequest | dict[str, object] | int | None = None,
    height: int | None = None,
) -> ResizeRequest:
    """Turn any accepted resize call shape into a ResizeRequest.

    ``normalize_resize_request(300, 200)`` and
    ``normalize_resize_request({"width": 300, "height": 200})`` are equivalent.
    """
    if isinstance(options, ResizeRequest):
        return options
    if isinstance(options, dict):
        return ResizeRequest.model_validate(options)
    return ResizeRequest(width=options, height=height)


class FormatOptions(BaseModel):
    format: ImageFormat = Field(..., description="Target encode format")
    options: dict[str, object] = Field(
        default_factory=dict,
        description="Encoder keyword arguments (e.g. quality)",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")


class TrimOptions(BaseModel):
    """Trim uniform borders.

    Pixels whose difference from ``background`` is at most ``threshold``
    are treated as border. Without a background the top-left pixel is used.
    """

    background: str | tuple[int, ...] | None = None
    threshold: float = Field(default=10, ge=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")


class PendingOperations(BaseModel):
    """Operations applied, in order, by a single ``materialize`` call."""

    resize: ResizeRequest | None = None
    extract: CropWindow | None = None
    trim: TrimOptions | None = None
    format: FormatOptions | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")


class EncodedImage(BaseModel):
    """Result of encoding a raster.

    For multi-frame outputs ``height`` is the height of all frames stacked,
    the way libvips-style engines report it.
    """

    data: bytes = Field(..., repr=False)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    size: int = Field(..., ge=0)
    format: str
    pages: int = Field(default=1, ge=1)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


# ─────────────────────────────────────────────────────────────
# Variant configuration
# ─────────────────────────────────────────────────────────────


class VariantSpec(BaseModel):
    """One declared output size."""

    name: str = Field(..., min_length=1, description="Unique size name")
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    fit: Fit | None = None
    position: str | int | None = None
    without_enlargement: bool | None = None
    without_reduction: bool | None = None
    format_options: FormatOptions | None = None
    trim_options: TrimOptions | None = None
    generate_image_name: Callable[..., str] | None = Field(default=None, exclude=True)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    def resize_request(self) -> ResizeRequest:
        return ResizeRequest(
            width=self.width,
            height=self.height,
            fit=self.fit,
            position=self.position,
            without_enlargement=self.without_enlargement,
            without_reduction=self.without_reduction,
        )


class UploadConfig(BaseModel):
    """Upload configuration of a collection."""

    focal_point: bool = Field(default=True, description="Enable focal point cropping")
    image_sizes: list[VariantSpec] = Field(default_factory=list)
    resize_options: ResizeRequest | None = None
    format_options: FormatOptions | None = None
    trim_options: TrimOptions | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def validate_unique_size_names(self) -> "UploadConfig":
        names = [size.name for size in self.image_sizes]
        if len(names) != len(set(names)):
            raise ValueError("Image size names must be unique")
        return self


# ─────────────────────────────────────────────────────────────
# Upload edits / stored focal data
# ─────────────────────────────────────────────────────────────


class CropPosition(BaseModel):
    x: float = Field(..., ge=0, le=100)
    y: float = Field(..., ge=0, le=100)


class UploadEdits(BaseModel):
    crop: CropPosition | None = None
    width_in_pixels: int | None = Field(default=None, gt=0)
    height_in_pixels: int | None = Field(default=None, gt=0)
    focal_point: FocalPoint | None = None


class FocalData(BaseModel):
    """Focal fields as stored on (or sent for) a document."""

    focal_x: float | None = None
    focal_y: float | None = None

    @property
    def is_complete(self) -> bool:
        return self.focal_x is not None and self.focal_y is not None


# ─────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────


class VariantResult(BaseModel):
    """Per-size metadata. All fields None means the size was omitted."""

    filename: str | None = None
    filesize: int | None = None
    width: int | None = None
    height: int | None = None
    mime_type: str | None = None
    format_substituted: bool = False

    @property
    def omitted(self) -> bool:
        return self.filename is None


class FileToSave(BaseModel):
    data: bytes = Field(..., repr=False)
    path: str


class ImageSizesResult(BaseModel):
    focal_point: FocalPoint | None = None
    size_data: dict[str, VariantResult] = Field(default_factory=dict)
    sizes_to_save: list[FileToSave] = Field(default_factory=list)
