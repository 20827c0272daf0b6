"""Crop window of an upload edit (pure)."""

import math

from ..common.schema_image import CropWindow, ImageDimensions, UploadEdits
from .focal_crop_planner import clamp_crop_window


def percent_to_pixel(value: float, dimension: int) -> int:
    return math.floor((value / 100) * dimension)


def plan_upload_crop(dimensions: ImageDimensions, edits: UploadEdits) -> CropWindow | None:
    """
    Window requested by an upload edit, or None when nothing is cropped.

    ``crop.x``/``crop.y`` are the top-left corner in percent of the original;
    the size is given in pixels. A size equal to the original is a no-op.
    """
    if edits.crop is None:
        return None

    width = edits.width_in_pixels or dimensions.width
    height = edits.height_in_pixels or dimensions.height
    if width == dimensions.width and height == dimensions.height:
        return None

    return clamp_crop_window(
        left=percent_to_pixel(edits.crop.x, dimensions.width),
        top=percent_to_pixel(edits.crop.y, dimensions.height),
        width=width,
        height=height,
        bounds=dimensions,
    )
