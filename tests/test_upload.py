"""Tests for main-file processing: upload crop and adjustments."""

from io import BytesIO

import pytest
from PIL import Image

from cl_image_sizes.algo.upload_crop import percent_to_pixel, plan_upload_crop
from cl_image_sizes.common.errors import InvalidRegionError
from cl_image_sizes.common.pillow_engine import PillowRasterEngine
from cl_image_sizes.common.schema_image import (
    CropPosition,
    CropWindow,
    FormatOptions,
    ImageDimensions,
    ResizeRequest,
    UploadConfig,
    UploadEdits,
)
from cl_image_sizes.upload import (
    adjust_upload,
    crop_upload,
    has_adjustments,
    resize_upload,
)

DIMENSIONS = ImageDimensions(width=200, height=100)

# ============================================================================
# Planning
# ============================================================================


def test_percent_to_pixel_floors():
    assert percent_to_pixel(33.3, 100) == 33
    assert percent_to_pixel(50, 201) == 100
    assert percent_to_pixel(0, 100) == 0


def test_no_crop_edit_plans_nothing():
    assert plan_upload_crop(DIMENSIONS, UploadEdits(width_in_pixels=50)) is None


def test_unchanged_size_plans_nothing():
    edits = UploadEdits(crop=CropPosition(x=0, y=0), width_in_pixels=200, height_in_pixels=100)
    assert plan_upload_crop(DIMENSIONS, edits) is None


def test_crop_window_from_percentages():
    edits = UploadEdits(crop=CropPosition(x=10, y=20), width_in_pixels=50, height_in_pixels=40)
    assert plan_upload_crop(DIMENSIONS, edits) == CropWindow(left=20, top=20, width=50, height=40)


def test_crop_window_is_clamped_to_image():
    edits = UploadEdits(crop=CropPosition(x=90, y=90), width_in_pixels=50, height_in_pixels=40)
    assert plan_upload_crop(DIMENSIONS, edits) == CropWindow(left=180, top=90, width=20, height=10)


def test_crop_at_far_edge_raises():
    edits = UploadEdits(crop=CropPosition(x=100, y=0), width_in_pixels=50, height_in_pixels=40)
    with pytest.raises(InvalidRegionError):
        _ = plan_upload_crop(DIMENSIONS, edits)


# ============================================================================
# Engine-backed processing
# ============================================================================


def test_crop_upload(engine: PillowRasterEngine, image_factory):
    data = image_factory(200, 100)
    edits = UploadEdits(crop=CropPosition(x=10, y=20), width_in_pixels=50, height_in_pixels=40)

    cropped = crop_upload(engine, data, DIMENSIONS, edits)

    assert cropped.dimensions == ImageDimensions(width=50, height=40)
    assert cropped.format == "png"
    assert cropped.filesize == len(cropped.data)


def test_crop_upload_unchanged_returns_source(engine: PillowRasterEngine, image_factory):
    data = image_factory(200, 100)
    edits = UploadEdits(crop=CropPosition(x=0, y=0), width_in_pixels=200, height_in_pixels=100)

    result = crop_upload(engine, data, DIMENSIONS, edits)

    assert result.data is data
    assert result.dimensions == DIMENSIONS
    assert result.format is None


def test_crop_upload_of_animated_source_reports_frame_height(
    engine: PillowRasterEngine, animated_gif: bytes
):
    edits = UploadEdits(crop=CropPosition(x=50, y=0), width_in_pixels=100, height_in_pixels=50)

    cropped = crop_upload(engine, animated_gif, DIMENSIONS, edits)

    assert cropped.dimensions == ImageDimensions(width=100, height=50)
    assert engine.probe(cropped.data).pages == 4


def test_resize_upload(engine: PillowRasterEngine, image_factory):
    cropped = crop_upload(
        engine,
        image_factory(200, 100),
        DIMENSIONS,
        UploadEdits(crop=CropPosition(x=0, y=0), width_in_pixels=100, height_in_pixels=100),
    )

    resized = resize_upload(engine, cropped, ResizeRequest(width=50))

    assert resized.dimensions == ImageDimensions(width=50, height=50)


def test_resize_upload_without_enlargement_is_noop(engine: PillowRasterEngine, image_factory):
    cropped = crop_upload(
        engine,
        image_factory(200, 100),
        DIMENSIONS,
        UploadEdits(crop=CropPosition(x=0, y=0), width_in_pixels=100, height_in_pixels=100),
    )

    assert resize_upload(engine, cropped, ResizeRequest(width=50, without_enlargement=True)) is cropped


def test_adjust_upload(engine: PillowRasterEngine, landscape_png: bytes):
    config = UploadConfig(
        resize_options=ResizeRequest(width=100),
        format_options=FormatOptions(format="jpeg"),
    )

    assert has_adjustments(config) is True
    adjusted = adjust_upload(engine, landscape_png, config)

    assert adjusted.dimensions == ImageDimensions(width=100, height=50)
    assert adjusted.format == "jpeg"
    with Image.open(BytesIO(adjusted.data)) as img:
        assert img.format == "JPEG"


def test_has_adjustments_without_options():
    assert has_adjustments(UploadConfig()) is False
