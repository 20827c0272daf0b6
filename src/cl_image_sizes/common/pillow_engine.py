from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import Final

from typing_extensions import override

from PIL import Image, ImageChops, ImageSequence, UnidentifiedImageError

from .errors import DecodeFailureError, InvalidRegionError, UnsupportedFormatError
from .formats import MULTI_FRAME_FORMATS, PIL_FORMATS, get_pil_format, normalize_format
from .raster_engine import RasterEngine
from .schema_image import (
    CropWindow,
    EncodedImage,
    ProbedImage,
    RasterInfo,
    TrimOptions,
)


@dataclass(frozen=True)
class PillowImage:
    """Decoded image: one Pillow image per frame."""

    frames: tuple[Image.Image, ...]
    source_format: str | None = None
    durations: tuple[int, ...] = field(default_factory=tuple)
    loop: int | None = None

    @property
    def width(self) -> int:
        return self.frames[0].width

    @property
    def frame_height(self) -> int:
        return self.frames[0].height

    @property
    def pages(self) -> int:
        return len(self.frames)

    def with_frames(self, frames: list[Image.Image]) -> PillowImage:
        return PillowImage(
            frames=tuple(frames),
            source_format=self.source_format,
            durations=self.durations,
            loop=self.loop,
        )


class PillowRasterEngine(RasterEngine[PillowImage]):
    """
    Pillow implementation of RasterEngine.

    Animated sources (GIF, WebP, APNG) keep every frame; encoders that cannot
    store frames write the first one only.
    """

    _RESAMPLE: Final[Image.Resampling] = Image.Resampling.LANCZOS

    def __init__(self) -> None:
        Image.init()
        self._supported: frozenset[str] = frozenset(
            fmt for fmt, pil_format in PIL_FORMATS.items() if pil_format in Image.SAVE
        )

    @property
    @override
    def supported_formats(self) -> frozenset[str]:
        return self._supported

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @override
    def probe(self, data: bytes) -> ProbedImage:
        try:
            # Image.open only parses the header; pixel data is read lazily
            with Image.open(BytesIO(data)) as img:
                return ProbedImage(
                    width=img.width,
                    height=img.height,
                    pages=getattr(img, "n_frames", 1),
                    format=normalize_format(img.format) if img.format else None,
                )
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise DecodeFailureError(f"Failed to read image header: {exc}") from exc

    @override
    def decode(self, data: bytes) -> PillowImage:
        try:
            with Image.open(BytesIO(data)) as img:
                source_format = normalize_format(img.format) if img.format else None
                loop = img.info.get("loop")
                frames: list[Image.Image] = []
                durations: list[int] = []
                for frame in ImageSequence.Iterator(img):
                    frames.append(self._normalize_mode(frame))
                    durations.append(int(frame.info.get("duration", 0)))
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise DecodeFailureError(f"Failed to decode image: {exc}") from exc

        return PillowImage(
            frames=tuple(frames),
            source_format=source_format,
            durations=tuple(durations),
            loop=loop,
        )

    @staticmethod
    def _normalize_mode(frame: Image.Image) -> Image.Image:
        if frame.mode in ("RGB", "RGBA", "L", "LA"):
            return frame.copy()
        if frame.mode == "P" and "transparency" not in frame.info:
            return frame.convert("RGB")
        return frame.convert("RGBA")

    @override
    def info(self, image: PillowImage) -> RasterInfo:
        return RasterInfo(
            width=image.width,
            height=image.frame_height * image.pages,
            pages=image.pages,
        )

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    @override
    def resize(self, image: PillowImage, width: int, height: int) -> PillowImage:
        return image.with_frames(
            [frame.resize((width, height), self._RESAMPLE) for frame in image.frames]
        )

    @override
    def crop(self, image: PillowImage, window: CropWindow) -> PillowImage:
        if (
            window.left + window.width > image.width
            or window.top + window.height > image.frame_height
        ):
            raise InvalidRegionError(
                left=window.left,
                top=window.top,
                width=window.width,
                height=window.height,
                bounds=(image.width, image.frame_height),
            )
        box = window.as_box()
        return image.with_frames([frame.crop(box) for frame in image.frames])

    @override
    def trim(self, image: PillowImage, options: TrimOptions) -> PillowImage:
        first = image.frames[0]
        # Grayscale frames are compared in RGBA so any background color applies
        rgba = first.convert("RGBA")
        background = options.background
        if background is None:
            background = rgba.getpixel((0, 0))  # pyright: ignore[reportAssignmentType]
        elif isinstance(background, tuple) and len(background) <= 2:
            gray = background[0]
            background = (gray, gray, gray, *background[1:])
        reference = Image.new("RGBA", rgba.size, background)  # pyright: ignore[reportArgumentType]

        diff = ImageChops.difference(rgba, reference).convert("L")
        threshold = options.threshold
        mask = diff.point(lambda value: 255 if value > threshold else 0)
        bbox = mask.getbbox()

        # Nothing but background: keep the image as is
        if bbox is None or bbox == (0, 0, first.width, first.height):
            return image
        return image.with_frames([frame.crop(bbox) for frame in image.frames])

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @override
    def encode(
        self,
        image: PillowImage,
        format: str | None = None,
        options: dict[str, object] | None = None,
    ) -> EncodedImage:
        fmt = normalize_format(format) if format else self._default_format(image)
        if fmt not in self._supported:
            raise UnsupportedFormatError(fmt, self._supported)

        frames = list(image.frames)
        save_kwargs: dict[str, object] = dict(options or {})

        # JPEG does not support alpha channel
        if fmt == "jpeg":
            frames = [frame.convert("RGB") if frame.mode != "RGB" else frame for frame in frames]
        if fmt == "png":
            save_kwargs.setdefault("optimize", True)

        keep_frames = len(frames) > 1 and fmt in MULTI_FRAME_FORMATS
        if keep_frames:
            save_kwargs["save_all"] = True
            save_kwargs["append_images"] = frames[1:]
            if image.durations:
                save_kwargs.setdefault("duration", list(image.durations))
            if image.loop is not None:
                save_kwargs.setdefault("loop", image.loop)

        buffer = BytesIO()
        frames[0].save(buffer, format=get_pil_format(fmt), **save_kwargs)
        data = buffer.getvalue()
        pages = len(frames) if keep_frames else 1

        return EncodedImage(
            data=data,
            width=frames[0].width,
            height=frames[0].height * pages,
            size=len(data),
            format=fmt,
            pages=pages,
        )

    def _default_format(self, image: PillowImage) -> str:
        if image.source_format and image.source_format in self._supported:
            return image.source_format
        return "png"
