"""Decide whether an image size is omitted, resized or focal-cropped (pure)."""

from ..common.schema_image import FitAction, ImageDimensions, VariantSpec


def sanitize_variant_spec(spec: VariantSpec) -> VariantSpec:
    """Default fit/position for sizes that forbid reduction."""
    if spec.without_reduction:
        return spec.model_copy(
            update={
                "fit": spec.fit or "contain",
                "position": spec.position or "left top",
            }
        )
    return spec


def decide_fit(
    original: ImageDimensions,
    spec: VariantSpec,
    *,
    has_focal_point: bool = False,
) -> FitAction:
    """
    Pick the action for one image size. The first matching rule wins.

    Args:
        original: Dimensions of the source image (after any upload crop)
        spec: Sanitized size configuration
        has_focal_point: Whether a focal point is active for this operation

    Returns:
        FitAction for the size
    """
    target_width = spec.width
    target_height = spec.height
    without_enlargement = spec.without_enlargement

    # Never upscale by default when the source is smaller on both axes
    if target_width and target_height:
        smaller_x_and_y = original.width < target_width and original.height < target_height
        if without_enlargement is None and smaller_x_and_y:
            return FitAction.OMIT

    if without_enlargement is None and not (target_width and target_height):
        if (target_width and original.width < target_width) or (
            target_height and original.height < target_height
        ):
            return FitAction.OMIT

    # A missing target axis compares as 0, so it never counts as "smaller"
    smaller_x_or_y = original.width < (target_width or 0) or original.height < (
        target_height or 0
    )

    if spec.fit in ("contain", "inside"):
        return FitAction.RESIZE

    if target_width is None and target_height is None:
        return FitAction.RESIZE

    target_aspect_ratio = (target_width or 1) / (target_height or 1)
    original_aspect_ratio = original.width / original.height

    if original_aspect_ratio == target_aspect_ratio:
        return FitAction.RESIZE

    if without_enlargement and smaller_x_or_y:
        return FitAction.RESIZE

    if spec.without_reduction and not smaller_x_or_y:
        return FitAction.RESIZE

    return FitAction.RESIZE_WITH_FOCAL_POINT if has_focal_point else FitAction.RESIZE
