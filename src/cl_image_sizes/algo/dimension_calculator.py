"""Final pixel dimensions for a resize request (pure)."""

import math

from ..common.schema_image import ImageDimensions, ResizeRequest


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's ``round`` rounds halves to even, which shifts sizes by a pixel
    (``round(312.5) == 312``).
    """
    return math.floor(value + 0.5)


def calculate_dimensions(original: ImageDimensions, request: ResizeRequest) -> ImageDimensions:
    """
    Compute the dimensions a resize request produces for an image.

    Args:
        original: Dimensions of the image being resized
        request: Target width/height and fit mode. ``fit`` defaults to cover.

    Returns:
        Resulting dimensions, each axis at least 1 pixel
    """
    target_width = request.width
    target_height = request.height
    fit = request.fit or "cover"
    aspect_ratio = original.width / original.height

    if target_width and target_height:
        target_aspect_ratio = target_width / target_height

        if fit == "fill":
            width, height = target_width, target_height

        elif fit in ("contain", "inside"):
            if aspect_ratio > target_aspect_ratio:
                # Width is the limiting axis
                width = target_width
                height = round_half_up(target_width / aspect_ratio)
                if fit == "inside" and height > target_height:
                    height = target_height
                    width = round_half_up(target_height * aspect_ratio)
            else:
                height = target_height
                width = round_half_up(target_height * aspect_ratio)
                if fit == "inside" and width > target_width:
                    width = target_width
                    height = round_half_up(target_width / aspect_ratio)

        elif fit == "outside":
            if aspect_ratio > target_aspect_ratio:
                width = max(target_width, round_half_up(target_height * aspect_ratio))
                height = round_half_up(width / aspect_ratio)
            else:
                height = max(target_height, round_half_up(target_width / aspect_ratio))
                width = round_half_up(height * aspect_ratio)

        else:
            # cover: scale by the axis that leaves the other one overflowing
            if aspect_ratio > target_aspect_ratio:
                height = target_height
                width = round_half_up(target_height * aspect_ratio)
            else:
                width = target_width
                height = round_half_up(target_width / aspect_ratio)

    elif target_width:
        width = target_width
        height = round_half_up(target_width / aspect_ratio)

    elif target_height:
        height = target_height
        width = round_half_up(target_height * aspect_ratio)

    else:
        return original

    return ImageDimensions(width=max(1, width), height=max(1, height))


def frame_height(height: int, pages: int | None) -> int:
    """Height of a single frame from the stacked height of an animated image."""
    if pages and pages > 1:
        return height // pages
    return height
