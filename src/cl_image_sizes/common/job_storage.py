"""
JobStorage Protocol - interface for job-scoped storage of source and generated images.

Design goals:
- Hide internal folder structure
- Accept generated image bytes as produced by the pipeline
- Keep storage as the single authority over paths
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .schema_image import FileToSave


class JobStorageError(Exception):
    """Base class for storage-related errors."""


class JobDirectoryCreationError(JobStorageError):
    def __init__(self, job_id: str | int):
        self.job_id: str | int = job_id
        super().__init__(f"Failed to create storage directory for job '{job_id}'")


class SavedJobFile(BaseModel):
    """Metadata of a saved job file."""

    relative_path: str = Field(
        ...,
        description="Relative path of the saved file within the job storage",
    )
    size: int = Field(
        ...,
        ge=0,
        description="File size in bytes",
    )
    hash: str | None = Field(
        None,
        description="SHA256 of the written bytes",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")


@runtime_checkable
class JobStorage(Protocol):
    """
    Protocol for job-scoped file storage.

    Callers interact ONLY via job_id and relative paths.
    """

    def create_directory(self, job_id: str) -> None: ...

    def remove(self, job_id: str) -> bool:
        """
        Remove all files associated with a job.

        Returns:
            True if removed successfully, False otherwise.
        """
        ...

    async def read(self, job_id: str, relative_path: str) -> bytes:
        """
        Read a stored file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        ...

    async def save(self, job_id: str, relative_path: str, data: bytes) -> SavedJobFile:
        """Write bytes, replacing an existing file at the same path."""
        ...

    async def save_files(self, job_id: str, files: Sequence[FileToSave]) -> list[SavedJobFile]:
        """Persist generated images, in order."""
        ...

    def resolve_path(self, job_id: str, relative_path: str | None = None) -> Path:
        """Resolve a job-relative path to an absolute filesystem path."""
        ...
