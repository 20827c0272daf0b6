"""Pre-scale size and focal-point crop window computation (pure).

A focal crop is done in two steps: scale the whole image so that the target
box fits inside it along the limiting axis (a cover-style pre-scale), then
extract a target-sized window centred on the focal point, pushed back inside
the pre-scaled image where it would overflow.
"""

import math
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from ..common.errors import InvalidRegionError
from ..common.schema_image import (
    CropWindow,
    FocalPoint,
    ImageDimensions,
    ResizeRequest,
)
from .dimension_calculator import round_half_up


class PrescalePlan(BaseModel):
    target: ImageDimensions
    prescale: ImageDimensions
    prioritize_height: bool

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    def resize_request(self) -> ResizeRequest:
        if self.prioritize_height:
            return ResizeRequest(height=self.prescale.height, fit="cover")
        return ResizeRequest(width=self.prescale.width, fit="cover")


class FocalCropPlan(BaseModel):
    prescale: ImageDimensions
    crop_window: CropWindow

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


def resolve_target(original: ImageDimensions, request: ResizeRequest) -> ImageDimensions:
    """Fill in a missing target axis from the original aspect ratio."""
    aspect_ratio = original.width / original.height
    width = request.width
    height = request.height

    if height and not width:
        width = round_half_up(height * aspect_ratio)
    if width and not height:
        height = round_half_up(width / aspect_ratio)

    return ImageDimensions(
        width=max(1, width or original.width),
        height=max(1, height or original.height),
    )


def plan_prescale(original: ImageDimensions, request: ResizeRequest) -> PrescalePlan:
    target = resolve_target(original, request)
    aspect_ratio = original.width / original.height
    prioritize_height = target.width / target.height < aspect_ratio

    if prioritize_height:
        prescale = ImageDimensions(
            width=max(1, round_half_up(target.height * aspect_ratio)),
            height=target.height,
        )
    else:
        prescale = ImageDimensions(
            width=target.width,
            height=max(1, round_half_up(target.width / aspect_ratio)),
        )

    return PrescalePlan(target=target, prescale=prescale, prioritize_height=prioritize_height)


def _focal_bound(scaled: int, target: int, percent: float) -> float:
    focal_center = scaled * (percent / 100)
    bound = focal_center - target / 2
    if focal_center + target / 2 > scaled:
        bound = scaled - target
    return max(bound, 0)


def clamp_crop_window(
    *,
    left: float,
    top: float,
    width: float,
    height: float,
    bounds: ImageDimensions,
) -> CropWindow:
    """
    Clamp a requested region into ``bounds``.

    Offsets are floored and pulled to >= 0; extents that overflow are cut
    back to the remaining space.

    Raises:
        InvalidRegionError: If no positive region remains
    """
    clamped_left = max(0, math.floor(left))
    clamped_top = max(0, math.floor(top))
    clamped_width = min(math.floor(width), bounds.width - clamped_left)
    clamped_height = min(math.floor(height), bounds.height - clamped_top)

    if clamped_width <= 0 or clamped_height <= 0:
        raise InvalidRegionError(
            left=left,
            top=top,
            width=width,
            height=height,
            bounds=(bounds.width, bounds.height),
        )

    return CropWindow(
        left=clamped_left,
        top=clamped_top,
        width=clamped_width,
        height=clamped_height,
    )


def plan_crop_window(
    prescaled: ImageDimensions,
    target: ImageDimensions,
    focal_point: FocalPoint,
) -> CropWindow:
    """
    Window of ``target`` size around the focal point of a pre-scaled image.

    Args:
        prescaled: True dimensions of the pre-scaled image (one frame)
        target: Requested output size
        focal_point: Focal point in percent

    Returns:
        CropWindow lying entirely within ``prescaled``
    """
    left = _focal_bound(prescaled.width, target.width, focal_point.x)
    top = _focal_bound(prescaled.height, target.height, focal_point.y)

    return clamp_crop_window(
        left=left,
        top=top,
        width=target.width,
        height=target.height,
        bounds=prescaled,
    )


def plan_focal_crop(
    original: ImageDimensions,
    request: ResizeRequest,
    focal_point: FocalPoint,
) -> FocalCropPlan:
    """Pre-scale dimensions and crop window from the computed pre-scale estimate."""
    plan = plan_prescale(original, request)
    return FocalCropPlan(
        prescale=plan.prescale,
        crop_window=plan_crop_window(plan.prescale, plan.target, focal_point),
    )
