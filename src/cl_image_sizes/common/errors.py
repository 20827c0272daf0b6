"""Error taxonomy for image size generation."""

from typing_extensions import override


class ImageSizesError(Exception):
    """Base class for image size generation errors."""


class DecodeFailureError(ImageSizesError):
    """Raised when source bytes cannot be probed or decoded.

    Fatal for the whole pipeline: no geometry is computable without
    dimensions.
    """

    def __init__(self, message: str = "Failed to decode image"):
        self.message: str = message
        super().__init__(self.message)


class InvalidRegionError(ImageSizesError):
    """Raised when a crop window has no positive area after clamping."""

    def __init__(
        self,
        *,
        left: float,
        top: float,
        width: float,
        height: float,
        bounds: tuple[int, int],
    ):
        self.left: float = left
        self.top: float = top
        self.width: float = width
        self.height: float = height
        self.bounds: tuple[int, int] = bounds
        super().__init__(
            f"Cannot extract region left={left}, top={top}, width={width}, height={height} "
            + f"from image of size {bounds[0]}x{bounds[1]}"
        )


class UnsupportedFormatError(ImageSizesError):
    """Raised when neither the requested format nor its fallback can be encoded."""

    def __init__(self, requested: str, supported: frozenset[str] | set[str]):
        self.requested: str = requested
        self.supported: frozenset[str] = frozenset(supported)
        super().__init__(
            f"Unsupported format: {requested}. Supported: {', '.join(sorted(self.supported))}"
        )


class VariantProcessingError(ImageSizesError):
    """A single image size failed; carries the size name."""

    def __init__(self, size_name: str, cause: BaseException):
        self.size_name: str = size_name
        self.cause: BaseException = cause
        super().__init__(size_name, cause)

    @override
    def __str__(self) -> str:
        return f"Image size '{self.size_name}' failed: {self.cause}"


class VariantCancelledError(ImageSizesError):
    """Raised inside a worker thread once a sibling size has failed."""

    def __init__(self, size_name: str):
        self.size_name: str = size_name
        super().__init__(f"Image size '{size_name}' cancelled")
