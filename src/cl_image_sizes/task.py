"""Image sizes task implementation."""

import asyncio
from io import BytesIO
from pathlib import PurePosixPath
from typing import Any, Callable

from typing_extensions import override

from loguru import logger

from .algo.focal_point_resolver import resolve_focal_point, should_reprocess
from .algo.naming import split_filename
from .common.compute_module import ComputeModule
from .common.formats import can_resize_image, extension_for_mime_type, mime_type_for_format
from .common.job_storage import JobStorage
from .common.pillow_engine import PillowRasterEngine
from .common.raster_engine import RasterEngine
from .common.schema_image import FileToSave, ImageDimensions, ImageSizesResult
from .pipeline import VariantPipeline
from .schema import ImageSizesOutput, ImageSizesParams
from .upload import ProcessedFile, adjust_upload, crop_upload, has_adjustments, resize_upload
from .utils.media_types import MediaType, determine_mime, sniff_mime_type


class ImageSizesTask(ComputeModule[ImageSizesParams, ImageSizesOutput]):
    """Compute module that stores an uploaded image and generates its sizes."""

    schema: type[ImageSizesParams] = ImageSizesParams

    def __init__(self, engine: RasterEngine[Any] | None = None):
        self.engine: RasterEngine[Any] | None = engine

    @property
    @override
    def task_type(self) -> str:
        return "image_sizes"

    @override
    def setup(self) -> None:
        if self.engine is None:
            self.engine = PillowRasterEngine()

    @override
    async def run(
        self,
        job_id: str,
        params: ImageSizesParams,
        storage: JobStorage,
        progress_callback: Callable[[int], None] | None = None,
    ) -> ImageSizesOutput:
        engine = self.engine or PillowRasterEngine()
        config = params.upload
        edits = params.upload_edits

        data = await storage.read(job_id, params.input_path)
        bytes_io = BytesIO(data)
        source_mime = sniff_mime_type(bytes_io)
        media_type = determine_mime(bytes_io, source_mime)
        if media_type != MediaType.IMAGE:
            raise ValueError(f"Unsupported media type: {media_type}. Only images are supported.")

        probed = await asyncio.to_thread(engine.probe, data)
        if not self._needs_processing(params):
            filename = self._main_filename(params, source_mime)
            logger.info(f"Job {job_id}: {filename} unchanged, keeping stored image sizes")
            stored = params.stored
            return ImageSizesOutput(
                filename=filename,
                filesize=len(data),
                width=probed.width,
                height=probed.height,
                mime_type=source_mime,
                focal_x=stored.focal_x if stored else None,
                focal_y=stored.focal_y if stored else None,
                reprocessed=False,
            )

        focal_point = resolve_focal_point(
            params.operation,
            upload_edits=edits,
            incoming=params.incoming,
            stored=params.stored,
        )
        if progress_callback:
            progress_callback(10)

        supports_resize = can_resize_image(source_mime)
        source = ProcessedFile(data=data, width=probed.width, height=probed.height)

        if edits.crop is not None:
            main = await asyncio.to_thread(crop_upload, engine, data, probed.dimensions, edits)
            if config.resize_options is not None:
                main = await asyncio.to_thread(resize_upload, engine, main, config.resize_options)
            # Sizes are generated from the cropped file
            for_resize = main
        else:
            main = source
            if supports_resize and has_adjustments(config):
                main = await asyncio.to_thread(adjust_upload, engine, data, config)
            for_resize = source

        mime_type = (mime_type_for_format(main.format) if main.format else None) or source_mime
        filename = self._main_filename(params, mime_type)
        output_dir = params.output_path.rstrip("/")
        files = [FileToSave(data=main.data, path=f"{output_dir}/{filename}")]
        if progress_callback:
            progress_callback(30)

        result = ImageSizesResult()
        if supports_resize and (config.image_sizes or config.focal_point):
            pipeline = VariantPipeline(
                engine,
                static_dir=output_dir,
                focal_point_enabled=config.focal_point,
            )
            result = await pipeline.run(
                data=for_resize.data,
                filename=filename,
                mime_type=mime_type,
                image_sizes=config.image_sizes,
                dimensions=ImageDimensions(width=for_resize.width, height=for_resize.height),
                focal_point=focal_point,
            )
            files.extend(result.sizes_to_save)
        if progress_callback:
            progress_callback(80)

        saved = await storage.save_files(job_id, files)
        logger.info(f"Job {job_id}: saved {filename} and {len(saved) - 1} image size(s)")

        return ImageSizesOutput(
            filename=filename,
            filesize=main.filesize,
            width=main.width,
            height=main.height,
            mime_type=mime_type,
            focal_x=result.focal_point.x if result.focal_point else None,
            focal_y=result.focal_point.y if result.focal_point else None,
            sizes=result.size_data,
            files=[file.relative_path for file in saved],
        )

    @staticmethod
    def _needs_processing(params: ImageSizesParams) -> bool:
        """Updates without a new file only regenerate when the edits require it."""
        if params.operation != "update" or params.new_file:
            return True
        return should_reprocess(params.upload_edits, params.stored)

    @staticmethod
    def _main_filename(params: ImageSizesParams, mime_type: str) -> str:
        name = params.filename or PurePosixPath(params.input_path).name
        base = split_filename(name)
        extension = extension_for_mime_type(mime_type) or base.ext
        return f"{base.name}.{extension}"
