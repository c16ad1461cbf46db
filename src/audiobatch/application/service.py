"""Public batch API: process one file or a whole folder."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from audiobatch.domain.models import BatchResult, LocalFileStatus, Manifest, ProgressSnapshot
from audiobatch.domain.protocols import IDownloader, IJobClient, ProgressCallback
from audiobatch.domain.exceptions import ConfigurationError
from audiobatch.application.pipeline import FilePipeline
from audiobatch.application.scheduler import BatchScheduler
from audiobatch.infrastructure.api.client import JobApiClient
from audiobatch.infrastructure.config.loader import (
    DEFAULT_CONCURRENCY,
    DEFAULT_POLL_INTERVAL,
    BatchConfig,
)
from audiobatch.infrastructure.io.downloader import HttpDownloader
from audiobatch.infrastructure.storage.filesystem import LocalFileSystem
from audiobatch.shared.logging import get_logger
from audiobatch.shared.types import PathLike

logger = get_logger(__name__)


def _log_progress(file_path: Path, status: LocalFileStatus, snapshot: ProgressSnapshot) -> None:
    logger.debug(f"{file_path.name}: {status.value} {snapshot.counts()}")


def build_pipeline(
    config: BatchConfig,
    client: Optional[IJobClient] = None,
    downloader: Optional[IDownloader] = None,
    on_log: Optional[Callable[[str], Any]] = None
) -> FilePipeline:
    """
    Create a FilePipeline with all dependencies from config.

    Raises:
        ConfigurationError: If the API key or workflow id is missing
    """
    config.require_credentials()
    filesystem = LocalFileSystem()
    if client is None:
        client = JobApiClient(api_key=config.api_key, api_base=config.api_base)
    if downloader is None:
        downloader = HttpDownloader(filesystem=filesystem)

    return FilePipeline(
        client=client,
        workflow_id=config.workflow_id,
        downloader=downloader,
        filesystem=filesystem,
        poll_interval=config.poll_interval,
        poll_timeout=config.poll_timeout,
        on_log=on_log or logger.info,
    )


async def run_batch(
    config: BatchConfig,
    *,
    cancel_signal: Optional[asyncio.Event] = None,
    on_progress: Optional[ProgressCallback] = None,
    on_log: Optional[Callable[[str], Any]] = None,
    on_error: Optional[Callable[[str], Any]] = None,
    client: Optional[IJobClient] = None,
    downloader: Optional[IDownloader] = None
) -> BatchResult:
    """
    Run a batch described by ``config``.

    Raises:
        ConfigurationError: If credentials or the input folder are missing
    """
    config.require_credentials()
    if config.input_folder is None:
        raise ConfigurationError("input_folder is required")

    on_log = on_log or logger.info
    on_error = on_error or logger.error

    pipeline = build_pipeline(config, client=client, downloader=downloader, on_log=on_log)
    scheduler = BatchScheduler(
        pipeline,
        concurrency=config.concurrency,
        extensions=config.extensions,
        abort_pending_on_cancel=config.abort_pending_on_cancel,
        on_progress=on_progress or _log_progress,
        on_log=on_log,
        on_error=on_error,
    )
    return await scheduler.run_batch(config.input_folder, config.output_folder, cancel_signal)


async def process_file(
    api_key: str,
    workflow_id: str,
    file_path: PathLike,
    output_folder: PathLike,
    poll_interval: Optional[float] = None,
    *,
    poll_timeout: Optional[float] = None,
    api_base: Optional[str] = None,
    on_log: Optional[Callable[[str], Any]] = None,
    client: Optional[IJobClient] = None,
    downloader: Optional[IDownloader] = None
) -> Manifest:
    """
    Process a single file and download its results into ``output_folder``.

    Args:
        api_key: API key
        workflow_id: Workflow the job is submitted against
        file_path: Local input file
        output_folder: Folder the artifacts are written to
        poll_interval: Seconds between status checks (default: 1.0)
        poll_timeout: Optional limit on total polling time
        api_base: Optional API base URL
        on_log: Callback for informational messages
        client: Pre-built job client (built from api_key when omitted)
        downloader: Pre-built downloader

    Returns:
        Manifest mapping artifact name to local path

    Raises:
        ConfigurationError: If the API key or workflow id is missing
        DomainException: Any pipeline error for this file
    """
    config = BatchConfig(
        api_key=api_key,
        workflow_id=workflow_id,
        output_folder=Path(output_folder),
        poll_interval=DEFAULT_POLL_INTERVAL if poll_interval is None else poll_interval,
        poll_timeout=poll_timeout,
        api_base=api_base,
    )
    pipeline = build_pipeline(config, client=client, downloader=downloader, on_log=on_log)
    return await pipeline.run(file_path, config.output_folder)


async def process_folder(
    api_key: str,
    workflow_id: str,
    input_folder: PathLike,
    output_folder: PathLike,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    poll_interval: Optional[float] = None,
    poll_timeout: Optional[float] = None,
    cancel_signal: Optional[asyncio.Event] = None,
    on_progress: Optional[ProgressCallback] = None,
    on_log: Optional[Callable[[str], Any]] = None,
    on_error: Optional[Callable[[str], Any]] = None,
    abort_pending_on_cancel: bool = False,
    extensions: Optional[Iterable[str]] = None,
    api_base: Optional[str] = None,
    client: Optional[IJobClient] = None,
    downloader: Optional[IDownloader] = None
) -> BatchResult:
    """
    Process every supported file in ``input_folder``.

    Per-file failures never raise; they show up as FAILED in
    ``result.snapshot`` and through ``on_error``.

    Raises:
        ConfigurationError: On missing credentials, bad concurrency or a
            missing input folder, before any network call
    """
    config_kwargs = dict(
        api_key=api_key,
        workflow_id=workflow_id,
        input_folder=Path(input_folder),
        output_folder=Path(output_folder),
        concurrency=concurrency,
        poll_interval=DEFAULT_POLL_INTERVAL if poll_interval is None else poll_interval,
        poll_timeout=poll_timeout,
        abort_pending_on_cancel=abort_pending_on_cancel,
        api_base=api_base,
    )
    if extensions is not None:
        config_kwargs['extensions'] = tuple(extensions)
    config = BatchConfig(**config_kwargs)

    return await run_batch(
        config,
        cancel_signal=cancel_signal,
        on_progress=on_progress,
        on_log=on_log,
        on_error=on_error,
        client=client,
        downloader=downloader,
    )
