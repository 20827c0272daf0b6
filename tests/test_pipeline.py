"""Tests for the concurrent variant pipeline."""

import asyncio
import threading
from io import BytesIO

import pytest
from PIL import Image, ImageDraw

from cl_image_sizes.algo.naming import split_filename
from cl_image_sizes.common.errors import (
    DecodeFailureError,
    UnsupportedFormatError,
    VariantCancelledError,
    VariantProcessingError,
)
from cl_image_sizes.common.pillow_engine import PillowRasterEngine
from cl_image_sizes.common.schema_image import (
    FocalPoint,
    FormatOptions,
    ImageDimensions,
    TrimOptions,
    VariantResult,
    VariantSpec,
)
from cl_image_sizes.pipeline import VariantPipeline

SIZES = [
    VariantSpec(name="square", width=300, height=300),
    VariantSpec(name="huge", width=2000, height=2000),
    VariantSpec(name="boxed", width=300, height=300, fit="contain"),
    VariantSpec(name="half", width=500, height=250),
]


def opened_size(data: bytes) -> tuple[int, int]:
    with Image.open(BytesIO(data)) as img:
        return img.size


# ============================================================================
# Results
# ============================================================================


@pytest.mark.asyncio
async def test_pipeline_generates_sizes_in_configuration_order(
    engine: PillowRasterEngine, landscape_png: bytes
):
    pipeline = VariantPipeline(engine, static_dir="media/")

    result = await pipeline.run(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=SIZES,
        focal_point=FocalPoint(x=80, y=50),
    )

    assert list(result.size_data) == ["square", "huge", "boxed", "half"]
    assert result.focal_point == FocalPoint(x=80, y=50)

    square = result.size_data["square"]
    assert square == VariantResult(
        filename="photo-300x300.png",
        filesize=square.filesize,
        width=300,
        height=300,
        mime_type="image/png",
    )
    assert result.size_data["huge"] == VariantResult()
    assert result.size_data["huge"].omitted
    assert result.size_data["boxed"].width == 300
    assert result.size_data["boxed"].height == 150
    assert result.size_data["half"].filename == "photo-500x250.png"

    paths = [file.path for file in result.sizes_to_save]
    assert paths == [
        "media/photo-300x300.png",
        "media/photo-300x150.png",
        "media/photo-500x250.png",
    ]
    filesizes = {size.filename: size.filesize for size in result.size_data.values()}
    for file in result.sizes_to_save:
        assert len(file.data) == filesizes[file.path.removeprefix("media/")]


@pytest.mark.asyncio
async def test_focal_crop_takes_window_around_focal_point(engine: PillowRasterEngine):
    # Left half black, right half white; a crop at x=100 lies in the white half
    img = Image.new("RGB", (1000, 500), (0, 0, 0))
    img.paste((255, 255, 255), (500, 0, 1000, 500))
    buffer = BytesIO()
    img.save(buffer, format="PNG")

    result = await VariantPipeline(engine, static_dir="media").run(
        data=buffer.getvalue(),
        filename="split.png",
        mime_type="image/png",
        image_sizes=[VariantSpec(name="square", width=300, height=300)],
        focal_point=FocalPoint(x=100, y=50),
    )

    with Image.open(BytesIO(result.sizes_to_save[0].data)) as cropped:
        assert cropped.size == (300, 300)
        red, green, blue = cropped.convert("RGB").getpixel((150, 150))
        assert min(red, green, blue) > 240


@pytest.mark.asyncio
async def test_without_focal_point_resizes_only(engine: PillowRasterEngine, landscape_png: bytes):
    result = await VariantPipeline(engine, static_dir="media").run(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=[VariantSpec(name="square", width=300, height=300)],
    )

    square = result.size_data["square"]
    assert (square.width, square.height) == (600, 300)
    assert opened_size(result.sizes_to_save[0].data) == (600, 300)
    assert result.focal_point is None


@pytest.mark.asyncio
async def test_focal_point_not_echoed_when_disabled(
    engine: PillowRasterEngine, landscape_png: bytes
):
    pipeline = VariantPipeline(engine, static_dir="media", focal_point_enabled=False)

    result = await pipeline.run(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=[VariantSpec(name="square", width=300, height=300)],
        focal_point=FocalPoint(x=50, y=50),
    )

    assert result.focal_point is None
    assert result.size_data["square"].width == 300


@pytest.mark.asyncio
async def test_dimensions_override_drives_decisions(
    engine: PillowRasterEngine, landscape_png: bytes
):
    result = await VariantPipeline(engine, static_dir="media").run(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=[VariantSpec(name="large", width=800, height=400)],
        dimensions=ImageDimensions(width=400, height=200),
    )

    assert result.size_data["large"].omitted


@pytest.mark.asyncio
async def test_pipeline_geometry_is_deterministic(engine: PillowRasterEngine, landscape_png: bytes):
    pipeline = VariantPipeline(engine, static_dir="media")
    kwargs = dict(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=SIZES,
        focal_point=FocalPoint(x=30, y=70),
    )

    first = await pipeline.run(**kwargs)
    second = await pipeline.run(**kwargs)

    assert first.size_data == second.size_data


# ============================================================================
# Formats / naming
# ============================================================================


@pytest.mark.asyncio
async def test_format_options_change_extension_and_mime(
    engine: PillowRasterEngine, landscape_png: bytes
):
    spec = VariantSpec(
        name="thumb",
        width=100,
        height=50,
        format_options=FormatOptions(format="jpeg", options={"quality": 70}),
    )

    result = await VariantPipeline(engine, static_dir="media").run(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=[spec],
    )

    thumb = result.size_data["thumb"]
    assert thumb.filename == "photo-100x50.jpg"
    assert thumb.mime_type == "image/jpeg"
    assert thumb.format_substituted is False


@pytest.mark.asyncio
async def test_unsupported_format_is_substituted(restricted_engine, landscape_png: bytes):
    spec = VariantSpec(name="thumb", width=100, height=50, format_options=FormatOptions(format="avif"))

    result = await VariantPipeline(restricted_engine({"png", "jpeg"}), static_dir="media").run(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=[spec],
    )

    thumb = result.size_data["thumb"]
    assert thumb.format_substituted is True
    assert thumb.mime_type == "image/png"
    assert thumb.filename == "photo-100x50.png"


@pytest.mark.asyncio
async def test_custom_name_generator(engine: PillowRasterEngine, landscape_png: bytes):
    spec = VariantSpec(
        name="thumb",
        width=100,
        height=50,
        generate_image_name=lambda **kw: f"{kw['size_name']}/{kw['original_name']}.{kw['extension']}",
    )

    result = await VariantPipeline(engine, static_dir="media").run(
        data=landscape_png,
        filename="photo.png",
        mime_type="image/png",
        image_sizes=[spec],
    )

    assert result.size_data["thumb"].filename == "thumb/photo.png"
    assert result.sizes_to_save[0].path == "media/thumb/photo.png"


# ============================================================================
# Animated sources
# ============================================================================


@pytest.mark.asyncio
async def test_animated_source_reports_frame_height(
    engine: PillowRasterEngine, animated_gif: bytes
):
    result = await VariantPipeline(engine, static_dir="media").run(
        data=animated_gif,
        filename="anim.gif",
        mime_type="image/gif",
        image_sizes=[VariantSpec(name="small", width=100, height=50)],
    )

    small = result.size_data["small"]
    assert (small.width, small.height) == (100, 50)
    assert small.mime_type == "image/gif"
    assert small.filename == "anim-100x50.gif"
    assert small.filesize == len(result.sizes_to_save[0].data)
    assert engine.probe(result.sizes_to_save[0].data).pages == 4


# ============================================================================
# Trimming
# ============================================================================


@pytest.mark.asyncio
async def test_trim_with_rgb_background_on_grayscale_source(engine: PillowRasterEngine):
    img = Image.new("LA", (40, 20), (255, 255))
    ImageDraw.Draw(img).rectangle([10, 5, 19, 14], fill=(0, 255))
    buffer = BytesIO()
    img.save(buffer, format="PNG")

    result = await VariantPipeline(engine, static_dir="media").run(
        data=buffer.getvalue(),
        filename="gray.png",
        mime_type="image/png",
        image_sizes=[
            VariantSpec(
                name="trimmed",
                width=40,
                height=20,
                trim_options=TrimOptions(background=(255, 255, 255)),
            )
        ],
    )

    trimmed = result.size_data["trimmed"]
    assert (trimmed.width, trimmed.height) == (10, 10)
    assert trimmed.filename == "gray-10x10.png"
    assert opened_size(result.sizes_to_save[0].data) == (10, 10)


# ============================================================================
# Failures
# ============================================================================


@pytest.mark.asyncio
async def test_probe_failure_is_fatal(engine: PillowRasterEngine):
    with pytest.raises(DecodeFailureError):
        _ = await VariantPipeline(engine, static_dir="media").run(
            data=b"not an image",
            filename="broken.png",
            mime_type="image/png",
            image_sizes=SIZES,
        )


@pytest.mark.asyncio
async def test_failing_size_carries_its_name(restricted_engine, landscape_jpeg: bytes):
    sizes = [
        VariantSpec(name="ok", width=100, height=50),
        VariantSpec(name="bad", width=100, height=50, format_options=FormatOptions(format="webp")),
    ]

    with pytest.raises(VariantProcessingError) as exc_info:
        _ = await VariantPipeline(restricted_engine({"jpeg"}), static_dir="media").run(
            data=landscape_jpeg,
            filename="photo.jpg",
            mime_type="image/jpeg",
            image_sizes=sizes,
        )

    assert exc_info.value.size_name == "bad"
    assert isinstance(exc_info.value.cause, UnsupportedFormatError)
    assert "bad" in str(exc_info.value)


class BlockingEngine(PillowRasterEngine):
    """JPEG-only engine whose decode waits for ``release``."""

    def __init__(self):
        super().__init__()
        self._supported = frozenset({"jpeg"})
        self.release = threading.Event()
        self.decoded = threading.Event()
        self.resized: list[tuple[int, int]] = []

    def decode(self, data: bytes):
        _ = self.release.wait(timeout=5)
        try:
            return super().decode(data)
        finally:
            self.decoded.set()

    def resize(self, image, width: int, height: int):
        self.resized.append((width, height))
        return super().resize(image, width, height)


@pytest.mark.asyncio
async def test_failing_size_stops_sibling_threads(landscape_jpeg: bytes):
    engine = BlockingEngine()
    sizes = [
        VariantSpec(name="slow", width=100, height=50),
        VariantSpec(name="bad", width=100, height=50, format_options=FormatOptions(format="webp")),
    ]

    with pytest.raises(VariantProcessingError) as exc_info:
        _ = await VariantPipeline(engine, static_dir="media").run(
            data=landscape_jpeg,
            filename="photo.jpg",
            mime_type="image/jpeg",
            image_sizes=sizes,
        )
    assert exc_info.value.size_name == "bad"

    # The abandoned size may stop before or after its decode, never past it
    engine.release.set()
    _ = await asyncio.to_thread(engine.decoded.wait, 1)
    await asyncio.sleep(0.2)
    assert engine.resized == []


def test_process_variant_stops_when_cancelled(engine: PillowRasterEngine, landscape_png: bytes):
    cancelled = threading.Event()
    cancelled.set()
    pipeline = VariantPipeline(engine, static_dir="media")

    with pytest.raises(VariantCancelledError):
        _ = pipeline.process_variant(
            VariantSpec(name="square", width=300, height=300),
            landscape_png,
            ImageDimensions(width=1000, height=500),
            split_filename("photo.png"),
            "image/png",
            FocalPoint(x=50, y=50),
            cancelled,
        )
