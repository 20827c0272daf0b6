"""Image sizes task parameters and output schemas."""

from pydantic import Field

from .common.schema_image import FocalData, Operation, UploadConfig, UploadEdits, VariantResult
from .common.schema_job import BaseJobParams, TaskOutput


class ImageSizesParams(BaseJobParams):
    """Parameters for the image sizes task.

    Attributes:
        input_path: Uploaded source image, relative to the job
        output_path: Directory receiving the main file and every size
        upload: Upload configuration of the collection
        operation: create, update or duplicate
        upload_edits: Crop / focal point edits sent with the request
        incoming: Focal fields of the incoming document data
        stored: Focal fields of the stored document, if any
        filename: Name to save the main file under; defaults to the input name
        new_file: False when an update re-submits the stored file unchanged
    """

    upload: UploadConfig = Field(default_factory=UploadConfig)
    operation: Operation = "create"
    upload_edits: UploadEdits = Field(default_factory=UploadEdits)
    incoming: FocalData | None = None
    stored: FocalData | None = None
    filename: str | None = Field(default=None, min_length=1)
    new_file: bool = True


class ImageSizesOutput(TaskOutput):
    """Document-level file data of a processed upload."""

    filename: str = Field(..., description="Saved name of the main file")
    filesize: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0, description="Height of one frame")
    mime_type: str
    focal_x: float | None = None
    focal_y: float | None = None
    sizes: dict[str, VariantResult] = Field(default_factory=dict)
    files: list[str] = Field(
        default_factory=list,
        description="Job-relative paths of every written file, main file first",
    )
    reprocessed: bool = Field(
        default=True, description="False when an update left the stored files untouched"
    )
