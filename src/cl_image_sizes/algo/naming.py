"""Output file names for image sizes."""

from pathlib import PurePosixPath
from typing import NamedTuple

from ..common.schema_image import VariantSpec


class BaseName(NamedTuple):
    name: str
    ext: str


def split_filename(filename: str) -> BaseName:
    """Split a saved filename into base name and extension.

    Directory components are dropped; a name without extension gets "png".
    """
    base = PurePosixPath(filename.replace("\\", "/")).name
    stem, dot, ext = base.rpartition(".")
    if not dot or not stem:
        return BaseName(name=base, ext="png")
    return BaseName(name=stem, ext=ext)


def create_image_name(*, output_image_name: str, width: int, height: int, extension: str) -> str:
    return f"{output_image_name}-{width}x{height}.{extension}"


def variant_filename(
    spec: VariantSpec,
    *,
    original: BaseName,
    extension: str,
    width: int,
    height: int,
) -> str:
    """Name of a generated size, from the encoded (not requested) dimensions."""
    if spec.generate_image_name is not None:
        return spec.generate_image_name(
            extension=extension,
            height=height,
            original_name=original.name,
            size_name=spec.name,
            width=width,
        )
    return create_image_name(
        output_image_name=original.name,
        width=width,
        height=height,
        extension=extension,
    )
