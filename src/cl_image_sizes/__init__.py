"""cl_image_sizes - Focal-point aware image size generation."""

from .common.compute_module import ComputeModule
from .common.errors import (
    DecodeFailureError,
    ImageSizesError,
    InvalidRegionError,
    UnsupportedFormatError,
    VariantProcessingError,
)
from .common.file_storage_impl import LocalFileStorage
from .common.job_storage import JobStorage, SavedJobFile
from .common.pillow_engine import PillowRasterEngine
from .common.raster_engine import RasterEngine, materialize
from .common.schema_image import (
    FocalPoint,
    ImageDimensions,
    ImageSizesResult,
    UploadConfig,
    VariantResult,
    VariantSpec,
)
from .common.schema_job import BaseJobParams, JobRecord, JobRecordUpdate, JobStatus
from .config import load_upload_config
from .pipeline import VariantPipeline
from .worker import Worker, get_task_registry

__version__ = "0.1.0"

__all__ = [
    "BaseJobParams",
    "ComputeModule",
    "DecodeFailureError",
    "FocalPoint",
    "ImageDimensions",
    "ImageSizesError",
    "ImageSizesResult",
    "InvalidRegionError",
    "JobRecord",
    "JobRecordUpdate",
    "JobStatus",
    "JobStorage",
    "LocalFileStorage",
    "PillowRasterEngine",
    "RasterEngine",
    "SavedJobFile",
    "UnsupportedFormatError",
    "UploadConfig",
    "VariantPipeline",
    "VariantProcessingError",
    "VariantResult",
    "VariantSpec",
    "Worker",
    "__version__",
    "get_task_registry",
    "load_upload_config",
    "materialize",
]
