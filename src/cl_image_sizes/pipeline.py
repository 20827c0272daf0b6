"""
VariantPipeline - generates every configured image size from one source.

Each size is an independent asyncio task; raster work runs in worker
threads from the shared source bytes. The first failing size cancels the
others, and their threads stop at the next raster step.
"""

import asyncio
import threading
from collections.abc import Callable, Sequence
from typing import Any

from loguru import logger

from .algo.dimension_calculator import calculate_dimensions, frame_height
from .algo.fit_decision import decide_fit, sanitize_variant_spec
from .algo.focal_crop_planner import plan_crop_window, plan_prescale
from .algo.naming import BaseName, split_filename, variant_filename
from .common.errors import VariantCancelledError, VariantProcessingError
from .common.formats import extension_for_mime_type, mime_type_for_format
from .common.raster_engine import RasterEngine, frame_dimensions, materialize
from .common.schema_image import (
    EncodedImage,
    FileToSave,
    FitAction,
    FocalPoint,
    FormatOptions,
    ImageDimensions,
    ImageSizesResult,
    PendingOperations,
    ResizeRequest,
    VariantResult,
    VariantSpec,
)
from .upload import resolve_format_options
from .utils.profiling import timed

VariantOutput = tuple[VariantResult, FileToSave | None]


class VariantPipeline:
    """
    Decide, compute and render the image sizes of one upload.

    Args:
        engine: Raster engine used for decoding, resampling and encoding
        static_dir: Directory the generated files are saved under
        focal_point_enabled: Whether the collection uses focal points
    """

    def __init__(
        self,
        engine: RasterEngine[Any],
        *,
        static_dir: str,
        focal_point_enabled: bool = True,
    ):
        self.engine: RasterEngine[Any] = engine
        self.static_dir: str = static_dir.rstrip("/")
        self.focal_point_enabled: bool = focal_point_enabled

    @timed
    async def run(
        self,
        *,
        data: bytes,
        filename: str,
        mime_type: str,
        image_sizes: Sequence[VariantSpec],
        dimensions: ImageDimensions | None = None,
        focal_point: FocalPoint | None = None,
    ) -> ImageSizesResult:
        """
        Generate all image sizes.

        Args:
            data: Source bytes, shared read-only by every size
            filename: Saved name of the main file; sizes derive their names from it
            mime_type: Mime type of the source, used when an encoder reports none
            image_sizes: Configured sizes, in output order
            dimensions: Dimensions to decide with (e.g. after an upload crop);
                probed from ``data`` when omitted
            focal_point: Active focal point, None disables focal cropping

        Returns:
            ImageSizesResult with one entry per size, in configuration order

        Raises:
            DecodeFailureError: If the source cannot be probed
            VariantProcessingError: For the first size that failed
        """
        # Probe failures are fatal for every size, raise before fanning out
        probed = await asyncio.to_thread(self.engine.probe, data)
        original = dimensions or probed.dimensions
        base = split_filename(filename)

        logger.info(
            f"Generating {len(image_sizes)} image size(s) for {filename} "
            + f"({original.width}x{original.height}, {probed.pages} frame(s))"
        )

        cancelled = threading.Event()
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = {
                    spec.name: tg.create_task(
                        self._run_variant(
                            spec, data, original, base, mime_type, focal_point, cancelled
                        )
                    )
                    for spec in image_sizes
                }
        except ExceptionGroup as group:
            raise group.exceptions[0]
        finally:
            # Threads of cancelled sizes keep running until they see this
            cancelled.set()

        result = ImageSizesResult(
            focal_point=focal_point if self.focal_point_enabled else None,
        )
        for name, task in tasks.items():
            variant, file = task.result()
            result.size_data[name] = variant
            if file is not None:
                result.sizes_to_save.append(file)

        logger.info(
            f"Generated {len(result.sizes_to_save)} of {len(image_sizes)} image size(s) for {filename}"
        )
        return result

    async def _run_variant(
        self,
        spec: VariantSpec,
        data: bytes,
        original: ImageDimensions,
        base: BaseName,
        mime_type: str,
        focal_point: FocalPoint | None,
        cancelled: threading.Event,
    ) -> VariantOutput:
        try:
            return await asyncio.to_thread(
                self.process_variant, spec, data, original, base, mime_type, focal_point, cancelled
            )
        except Exception as exc:
            cancelled.set()
            logger.error(f"Image size '{spec.name}' failed: {exc}")
            raise VariantProcessingError(spec.name, exc) from exc

    def process_variant(
        self,
        spec: VariantSpec,
        data: bytes,
        original: ImageDimensions,
        base: BaseName,
        mime_type: str,
        focal_point: FocalPoint | None,
        cancelled: threading.Event | None = None,
    ) -> VariantOutput:
        """Render a single size synchronously.

        Raises:
            VariantCancelledError: If ``cancelled`` is set between raster steps
        """
        spec = sanitize_variant_spec(spec)

        def checkpoint() -> None:
            if cancelled is not None and cancelled.is_set():
                raise VariantCancelledError(spec.name)

        action = decide_fit(original, spec, has_focal_point=focal_point is not None)
        logger.debug(f"Image size '{spec.name}': {action}")

        if action is FitAction.OMIT:
            return VariantResult(), None

        format_options, substituted = resolve_format_options(self.engine, spec.format_options)

        if action is FitAction.RESIZE_WITH_FOCAL_POINT and focal_point is not None:
            encoded = self._focal_crop(
                spec, data, original, focal_point, format_options, checkpoint
            )
        else:
            target = calculate_dimensions(original, spec.resize_request())
            operations = PendingOperations(
                resize=ResizeRequest(width=target.width, height=target.height, fit="fill"),
                trim=spec.trim_options,
                format=format_options,
            )
            checkpoint()
            image = self.engine.decode(data)
            encoded = materialize(self.engine, image, operations, checkpoint)

        return self._to_output(spec, encoded, base, mime_type, substituted)

    def _focal_crop(
        self,
        spec: VariantSpec,
        data: bytes,
        original: ImageDimensions,
        focal_point: FocalPoint,
        format_options: FormatOptions | None,
        checkpoint: Callable[[], None],
    ) -> EncodedImage:
        plan = plan_prescale(original, spec.resize_request())

        checkpoint()
        image = self.engine.decode(data)
        checkpoint()
        prescale = calculate_dimensions(frame_dimensions(self.engine, image), plan.resize_request())
        image = self.engine.resize(image, prescale.width, prescale.height)

        # Position the window on what the engine produced, not on the estimate
        window = plan_crop_window(frame_dimensions(self.engine, image), plan.target, focal_point)

        operations = PendingOperations(
            extract=window,
            trim=spec.trim_options,
            format=format_options,
        )
        return materialize(self.engine, image, operations, checkpoint)

    def _to_output(
        self,
        spec: VariantSpec,
        encoded: EncodedImage,
        base: BaseName,
        mime_type: str,
        substituted: bool,
    ) -> VariantOutput:
        height = frame_height(encoded.height, encoded.pages)
        mime = mime_type_for_format(encoded.format) or mime_type
        extension = extension_for_mime_type(mime) or base.ext

        filename = variant_filename(
            spec,
            original=base,
            extension=extension,
            width=encoded.width,
            height=height,
        )

        result = VariantResult(
            filename=filename,
            filesize=len(encoded.data),
            width=encoded.width,
            height=height,
            mime_type=mime,
            format_substituted=substituted,
        )
        return result, FileToSave(data=encoded.data, path=f"{self.static_dir}/{filename}")
