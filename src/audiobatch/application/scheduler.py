"""Batch scheduler: discovery, bounded admission, cancellation, resolution."""

import asyncio
import functools
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from audiobatch.domain.models import (
    SUPPORTED_EXTENSIONS,
    BatchResult,
    FileTask,
    LocalFileStatus,
)
from audiobatch.domain.protocols import IFileSystem, ProgressCallback
from audiobatch.domain.exceptions import ConfigurationError
from audiobatch.application.callbacks import report_error, report_log
from audiobatch.application.pipeline import FilePipeline
from audiobatch.application.progress import ProgressTracker
from audiobatch.application.results import ResultCollector
from audiobatch.application.worker_pool import WorkerPool
from audiobatch.infrastructure.storage.filesystem import LocalFileSystem
from audiobatch.shared.logging import get_logger
from audiobatch.shared.metrics import MetricsCollector
from audiobatch.shared.types import PathLike


DEFAULT_CONCURRENCY = 5


class BatchScheduler:
    """
    Runs a FilePipeline for every supported file in a folder.

    At most ``concurrency`` pipelines run at once; the rest wait in
    discovery order. A failing file is reported FAILED and never affects
    its siblings, so ``run_batch`` only raises for configuration problems.
    """

    def __init__(
        self,
        pipeline: FilePipeline,
        filesystem: Optional[IFileSystem] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
        abort_pending_on_cancel: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        on_log: Optional[Callable[[str], Any]] = None,
        on_error: Optional[Callable[[str], Any]] = None
    ):
        """
        Initialize the scheduler.

        Args:
            pipeline: Pipeline run for each admitted file
            filesystem: Filesystem used for discovery
            concurrency: Maximum number of pipelines in flight
            extensions: File extensions picked up during discovery
            abort_pending_on_cancel: Mark never-admitted files ABORTED on cancellation
                instead of leaving them PENDING
            on_progress: Called with (file, status, snapshot) on every status change
            on_log: Called with informational messages
            on_error: Called with per-file error messages

        Raises:
            ConfigurationError: If concurrency is not a positive integer
        """
        if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
            raise ConfigurationError(f"Concurrency must be a positive integer, got: {concurrency}")

        self._pipeline = pipeline
        self._filesystem = filesystem or LocalFileSystem()
        self.concurrency = concurrency
        self.extensions = tuple(extensions)
        self.abort_pending_on_cancel = abort_pending_on_cancel
        self._on_progress = on_progress
        self._on_log = on_log
        self._on_error = on_error
        self._logger = get_logger(__name__)

    async def run_batch(
        self,
        input_folder: PathLike,
        output_folder: PathLike,
        cancel_signal: Optional[asyncio.Event] = None
    ) -> BatchResult:
        """
        Process every supported file in ``input_folder``.

        Files are discovered once, up front. Setting ``cancel_signal`` stops
        further admissions; files already running finish normally.

        Args:
            input_folder: Folder scanned (non-recursively) for input files
            output_folder: Root folder for results, one subfolder per input file name
            cancel_signal: Optional event that requests cancellation

        Returns:
            BatchResult with one manifest per succeeded file

        Raises:
            ConfigurationError: If the input folder does not exist
        """
        input_folder = Path(input_folder)
        output_folder = Path(output_folder)
        if not input_folder.is_dir():
            raise ConfigurationError(f"Input folder not found: {input_folder}")

        files = self._filesystem.list_files(input_folder, self.extensions)
        tasks: Dict[Path, FileTask] = {
            path: FileTask.for_file(path, output_folder) for path in files
        }
        self._log(f"Found {len(tasks)} files in {input_folder} (concurrency={self.concurrency})")

        tracker = ProgressTracker(on_progress=self._on_progress, on_error=self._on_error)
        collector = ResultCollector()
        metrics = MetricsCollector()

        for task in tasks.values():
            await tracker.record_status(task.file_path, LocalFileStatus.PENDING)

        pool = WorkerPool(self.concurrency, cancel_signal=cancel_signal)
        for path, task in tasks.items():
            pool.submit(path, functools.partial(self._run_task, task, tracker, collector, metrics))

        skipped = await pool.drain()

        if skipped:
            self._log(f"Batch cancelled: {len(skipped)} files were not started")
            if self.abort_pending_on_cancel:
                for path in skipped:
                    tasks[path].status = LocalFileStatus.ABORTED
                    await tracker.record_status(path, LocalFileStatus.ABORTED)

        snapshot = tracker.snapshot()
        for status, paths in snapshot.items():
            metrics.increment_counter(f"files_{status.value.lower()}", len(paths))
        metrics.record_metric('peak_concurrency', pool.peak)

        self._log(
            f"Batch finished: {len(collector)} succeeded, "
            f"{len(snapshot.files(LocalFileStatus.FAILED))} failed, "
            f"{len(snapshot.files(LocalFileStatus.PENDING)) + len(snapshot.files(LocalFileStatus.ABORTED))} not processed"
        )
        return collector.build(snapshot, metrics.get_summary())

    async def _run_task(
        self,
        task: FileTask,
        tracker: ProgressTracker,
        collector: ResultCollector,
        metrics: MetricsCollector
    ) -> None:
        """Run one admitted file; all pipeline errors end here as FAILED."""
        task.status = LocalFileStatus.PROCESSING
        await tracker.record_status(task.file_path, LocalFileStatus.PROCESSING)

        try:
            with metrics.measure('file_duration'):
                manifest = await self._pipeline.run(task.file_path, task.output_folder)
        except Exception as e:
            task.status = LocalFileStatus.FAILED
            task.error = f"{type(e).__name__}: {e}"
            self._logger.debug(f"{task.file_path.name} failed", exc_info=True)
            report_error(self._on_error, f"{task.file_path.name}: {task.error}", logger=self._logger)
            await tracker.record_status(task.file_path, LocalFileStatus.FAILED)
            return

        collector.add(task.file_path, manifest)
        task.status = LocalFileStatus.SUCCEEDED
        await tracker.record_status(task.file_path, LocalFileStatus.SUCCEEDED)

    def _log(self, message: str) -> None:
        report_log(self._on_log, message, logger=self._logger)
