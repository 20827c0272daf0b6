"""Test configuration and fixtures for cl_image_sizes.

This module provides:
- Pytest configuration (markers)
- Synthetic image fixtures generated with Pillow (no media files on disk)
- Engine and storage fixtures
"""

from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from cl_image_sizes.common.file_storage_impl import LocalFileStorage
from cl_image_sizes.common.pillow_engine import PillowRasterEngine

ImageFactory = Callable[..., bytes]

FRAME_COLORS = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: full task tests (storage -> task -> storage)",
    )


# ============================================================================
# Image Fixtures
# ============================================================================


def make_image(
    width: int,
    height: int,
    format: str = "PNG",
    color: tuple[int, ...] = (200, 120, 40),
    mode: str = "RGB",
) -> bytes:
    """Encode a solid image with a marker in the top-left quadrant."""
    img = Image.new(mode, (width, height), color)
    draw = ImageDraw.Draw(img)
    draw.rectangle([0, 0, max(0, width // 4 - 1), max(0, height // 4 - 1)], fill=(0, 0, 0))
    buffer = BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


def make_animated_gif(width: int, height: int, frames: int = 4) -> bytes:
    """Encode an animated GIF whose frames all differ."""
    images = [
        Image.new("RGB", (width, height), FRAME_COLORS[index % len(FRAME_COLORS)])
        for index in range(frames)
    ]
    buffer = BytesIO()
    images[0].save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=images[1:],
        duration=100,
        loop=0,
    )
    return buffer.getvalue()


@pytest.fixture
def image_factory() -> ImageFactory:
    """Factory producing encoded still images."""
    return make_image


@pytest.fixture
def landscape_png() -> bytes:
    """1000x500 PNG."""
    return make_image(1000, 500)


@pytest.fixture
def landscape_jpeg() -> bytes:
    """1000x500 JPEG."""
    return make_image(1000, 500, format="JPEG")


@pytest.fixture
def animated_gif() -> bytes:
    """Four 200x100 frames."""
    return make_animated_gif(200, 100, frames=4)


# ============================================================================
# Engine / Storage Fixtures
# ============================================================================


@pytest.fixture
def engine() -> PillowRasterEngine:
    return PillowRasterEngine()


class RestrictedEngine(PillowRasterEngine):
    """Pillow engine that only encodes the given formats."""

    def __init__(self, formats: set[str]):
        super().__init__()
        self._supported = frozenset(formats)


@pytest.fixture
def restricted_engine() -> Callable[[set[str]], RestrictedEngine]:
    return RestrictedEngine


@pytest.fixture
def file_storage(tmp_path: Path) -> LocalFileStorage:
    """Job storage rooted in a temporary directory."""
    return LocalFileStorage(tmp_path / "storage")
