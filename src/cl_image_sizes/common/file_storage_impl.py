from __future__ import annotations

import hashlib
import shutil
from collections.abc import Sequence
from os import PathLike
from pathlib import Path
from typing_extensions import override

import aiofiles
from loguru import logger

from .job_storage import JobDirectoryCreationError, JobStorage, SavedJobFile
from .schema_image import FileToSave


class LocalFileStorage(JobStorage):
    """
    Local filesystem implementation of JobStorage.

    Layout:
        base_dir/
            <job_id>/
                <relative_path>
    """

    def __init__(self, base_dir: str | PathLike[str]):
        self._base_dir: Path = Path(base_dir).expanduser().resolve()
        self._base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _job_dir(self, job_id: str) -> Path:
        return self._base_dir / job_id

    def _safe_path(self, job_id: str, relative_path: str | None = None) -> Path:
        """
        Resolve and validate a job-relative path.
        Prevents path traversal.
        """
        base = self._job_dir(job_id).resolve()

        path = base if relative_path is None else (base / relative_path)
        resolved = path.resolve()

        if base not in resolved.parents and resolved != base:
            raise ValueError("Invalid relative path (path traversal detected)")

        return resolved

    # ------------------------------------------------------------------
    # Job lifecycle
    # ------------------------------------------------------------------

    @override
    def create_directory(self, job_id: str) -> None:
        try:
            self._job_dir(job_id).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise JobDirectoryCreationError(job_id) from exc

    @override
    def remove(self, job_id: str) -> bool:
        try:
            shutil.rmtree(self._job_dir(job_id), ignore_errors=False)
            return True
        except OSError:
            return False

    # ------------------------------------------------------------------
    # Reading / writing
    # ------------------------------------------------------------------

    @override
    async def read(self, job_id: str, relative_path: str) -> bytes:
        path = self._safe_path(job_id, relative_path)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {relative_path}")
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    @override
    async def save(self, job_id: str, relative_path: str, data: bytes) -> SavedJobFile:
        self.create_directory(job_id)

        dst = self._safe_path(job_id, relative_path)
        dst.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(dst, "wb") as f:
            _ = await f.write(data)

        return SavedJobFile(
            relative_path=relative_path,
            size=len(data),
            hash=hashlib.sha256(data).hexdigest(),
        )

    @override
    async def save_files(self, job_id: str, files: Sequence[FileToSave]) -> list[SavedJobFile]:
        saved: list[SavedJobFile] = []
        for file in files:
            saved.append(await self.save(job_id, file.path, file.data))
        logger.debug(f"Saved {len(saved)} file(s) for job {job_id}")
        return saved

    @override
    def resolve_path(self, job_id: str, relative_path: str | None = None) -> Path:
        return self._safe_path(job_id, relative_path)
