"""Worker runtime - dispatches job records to registered tasks."""

from importlib.metadata import entry_points
from typing import Callable, cast

from loguru import logger

from .common.compute_module import ComputeModule
from .common.job_storage import JobStorage
from .common.schema_job import BaseJobParams, JobRecord, JobRecordUpdate, JobStatus, TaskOutput

TASK_ENTRY_POINT_GROUP = "cl_image_sizes.tasks"


def get_task_registry() -> dict[str, ComputeModule[BaseJobParams, TaskOutput]]:
    """Dynamically load all tasks from entry points.

    Discovers tasks from [project.entry-points."cl_image_sizes.tasks"]
    in pyproject.toml.

    Returns:
        Dict mapping task_type -> ComputeModule instance

    Raises:
        RuntimeError: If a task fails to load (missing dependency, etc.)
    """
    registry: dict[str, ComputeModule[BaseJobParams, TaskOutput]] = {}
    eps = entry_points(group=TASK_ENTRY_POINT_GROUP)

    for ep in eps:
        try:
            task_class = cast(type[ComputeModule[BaseJobParams, TaskOutput]], ep.load())
            task: ComputeModule[BaseJobParams, TaskOutput] = task_class()
            registry[task.task_type] = task
        except Exception as e:
            # Missing dependency = exception (fail fast)
            raise RuntimeError(f"Failed to load task '{ep.name}': {e}") from e

    return registry


class Worker:
    """Runs job records against the task registry.

    Example:
        storage = LocalFileStorage("./media")
        worker = Worker(storage)
        update = await worker.run_job(job_record)
    """

    def __init__(
        self,
        job_storage: JobStorage,
        task_registry: dict[str, ComputeModule[BaseJobParams, TaskOutput]] | None = None,
    ):
        self.job_storage: JobStorage = job_storage
        self.task_registry: dict[str, ComputeModule[BaseJobParams, TaskOutput]] = (
            task_registry if task_registry is not None else get_task_registry()
        )

    def get_supported_task_types(self) -> list[str]:
        return list(self.task_registry.keys())

    async def run_job(
        self,
        job_record: JobRecord,
        progress_callback: Callable[[int], None] | None = None,
    ) -> JobRecordUpdate:
        """Execute one job; failures are reported in the returned update."""
        task = self.task_registry.get(job_record.task_type)
        if task is None:
            logger.warning(f"Job {job_record.job_id}: no task for '{job_record.task_type}'")
            return JobRecordUpdate(
                status=JobStatus.error,
                error_message=f"Unknown task type: {job_record.task_type}",
            )

        logger.info(f"Job {job_record.job_id}: running {job_record.task_type}")
        return await task.execute(job_record, self.job_storage, progress_callback)
