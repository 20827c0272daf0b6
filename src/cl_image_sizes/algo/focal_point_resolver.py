"""Effective focal point of an operation and the reprocess check."""

from ..common.schema_image import FocalData, FocalPoint, Operation, UploadEdits
from .dimension_calculator import round_half_up

DEFAULT_FOCAL_POINT = FocalPoint(x=50, y=50)


def _rounded(x: float, y: float) -> FocalPoint:
    return FocalPoint(x=round_half_up(x), y=round_half_up(y))


def resolve_focal_point(
    operation: Operation,
    *,
    upload_edits: UploadEdits | None = None,
    incoming: FocalData | None = None,
    stored: FocalData | None = None,
) -> FocalPoint | None:
    """
    Determine the focal point to apply, or None to leave sizes focal-free.

    Args:
        operation: create, update or duplicate
        upload_edits: Explicit edits sent with the request
        incoming: Focal fields of the incoming document data
        stored: Focal fields of the stored document

    Returns:
        FocalPoint with integer percentages, or None
    """
    if upload_edits is not None and upload_edits.focal_point is not None:
        point = upload_edits.focal_point
        return _rounded(point.x, point.y)

    incoming = incoming or FocalData()

    if stored is not None and stored.is_complete:
        # Clients send the focal fields on every save; unchanged means no refocus
        if incoming.focal_x == stored.focal_x and incoming.focal_y == stored.focal_y:
            return None

        if operation == "duplicate":
            x = incoming.focal_x if incoming.focal_x is not None else stored.focal_x
            y = incoming.focal_y if incoming.focal_y is not None else stored.focal_y
            return _rounded(x, y)  # pyright: ignore[reportArgumentType]

    if incoming.is_complete:
        return _rounded(incoming.focal_x, incoming.focal_y)  # pyright: ignore[reportArgumentType]

    if operation == "create":
        return DEFAULT_FOCAL_POINT

    return None


def should_reprocess(upload_edits: UploadEdits, stored: FocalData | None) -> bool:
    """Whether an update without a new file must regenerate derived images."""
    if stored is None:
        return False

    if (
        upload_edits.crop is not None
        or upload_edits.width_in_pixels is not None
        or upload_edits.height_in_pixels is not None
    ):
        return True

    if upload_edits.focal_point is not None:
        point = upload_edits.focal_point
        return not (point.x == stored.focal_x and point.y == stored.focal_y)

    return False
