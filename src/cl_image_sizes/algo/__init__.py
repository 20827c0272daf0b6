"""Pure geometry and decision functions.

Example::

    from cl_image_sizes.algo import decide_fit, plan_focal_crop
    from cl_image_sizes.common.schema_image import FocalPoint, ImageDimensions, VariantSpec

    original = ImageDimensions(width=1000, height=500)
    spec = VariantSpec(name="square", width=300, height=300)

    decide_fit(original, spec, has_focal_point=True)
    # FitAction.RESIZE_WITH_FOCAL_POINT

    plan_focal_crop(original, spec.resize_request(), FocalPoint(x=80, y=50)).crop_window
    # CropWindow(left=300, top=0, width=300, height=300)
"""

from .dimension_calculator import calculate_dimensions, frame_height, round_half_up
from .fit_decision import decide_fit, sanitize_variant_spec
from .focal_crop_planner import (
    clamp_crop_window,
    plan_crop_window,
    plan_focal_crop,
    plan_prescale,
)
from .focal_point_resolver import resolve_focal_point, should_reprocess
from .naming import create_image_name, split_filename, variant_filename
from .upload_crop import percent_to_pixel, plan_upload_crop

__all__ = [
    "calculate_dimensions",
    "clamp_crop_window",
    "create_image_name",
    "decide_fit",
    "frame_height",
    "percent_to_pixel",
    "plan_crop_window",
    "plan_focal_crop",
    "plan_prescale",
    "plan_upload_crop",
    "resolve_focal_point",
    "round_half_up",
    "sanitize_variant_spec",
    "should_reprocess",
    "split_filename",
    "variant_filename",
]
