"""Job records and the base params/output models of compute tasks."""

from enum import Enum
from typing import ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue

TaskParamsRecord = dict[str, JsonValue]
TaskOutputRecord = dict[str, JsonValue]


class BaseJobParams(BaseModel):
    input_path: str = Field(description="path to the source image, relative to the job")
    output_path: str = Field(description="directory for generated images, relative to the job")


class TaskOutput(BaseModel):
    pass


P = TypeVar("P", bound=BaseJobParams)
Q = TypeVar("Q", bound=TaskOutput)


class JobStatus(str, Enum):
    queued = "queued"
    processing = "processing"
    completed = "completed"
    error = "error"


class JobRecord(BaseModel):
    """Persisted job representation (DB / wire format)."""

    job_id: str
    task_type: str

    params: TaskParamsRecord
    output: TaskOutputRecord | None = None

    status: JobStatus = JobStatus.queued
    progress: int = Field(0, ge=0, le=100)
    error_message: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")


class JobRecordUpdate(BaseModel):
    status: JobStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    output: TaskOutputRecord | None = None
    error_message: str | None = None
    failed_size: str | None = Field(
        default=None,
        description="Name of the image size whose failure aborted the job",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")
