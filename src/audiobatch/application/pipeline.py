"""Single-file pipeline: upload, submit, poll, download, clean up."""

import asyncio
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

from audiobatch.domain.models import Manifest, RemoteJob, RemoteJobStatus
from audiobatch.domain.protocols import IDownloader, IFileSystem, IJobClient
from audiobatch.domain.exceptions import (
    CleanupError,
    DownloadError,
    JobTimeoutError,
    RemoteProcessingError,
    SubmissionError,
    UploadError,
)
from audiobatch.application.callbacks import report_log
from audiobatch.infrastructure.storage.filesystem import LocalFileSystem
from audiobatch.shared.logging import get_logger
from audiobatch.shared.types import PathLike


DEFAULT_POLL_INTERVAL = 1.0


def artifact_filename(name: str, url: str) -> str:
    """Local file name for an artifact: ``<name>.<extension from URL path>``."""
    suffix = PurePosixPath(urlparse(url).path).suffix
    return f"{name}{suffix}"


class FilePipeline:
    """
    Drives one file through the remote job API.

    Blocking client and downloader calls run in worker threads, so every
    network call and every poll wait is a suspension point for the event
    loop. There is no retry: the first failure is terminal for the file.
    """

    def __init__(
        self,
        client: IJobClient,
        workflow_id: str,
        downloader: IDownloader,
        filesystem: Optional[IFileSystem] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: Optional[float] = None,
        on_log: Optional[Callable[[str], Any]] = None
    ):
        """
        Initialize the pipeline.

        Args:
            client: Remote job API client
            workflow_id: Workflow every job is submitted against
            downloader: Artifact downloader
            filesystem: Filesystem used to create output folders
            poll_interval: Seconds between job status checks
            poll_timeout: Optional limit on total polling time (None polls forever)
            on_log: Callback for informational messages
        """
        self._client = client
        self.workflow_id = workflow_id
        self._downloader = downloader
        self._filesystem = filesystem or LocalFileSystem()
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self._on_log = on_log
        self._logger = get_logger(__name__)

    async def run(self, file_path: PathLike, output_folder: PathLike) -> Manifest:
        """
        Process one file end to end.

        Args:
            file_path: Local input file
            output_folder: Folder the result artifacts are written to

        Returns:
            Manifest mapping artifact name to downloaded path

        Raises:
            UploadError, SubmissionError, RemoteProcessingError, DownloadError
        """
        file_path = Path(file_path)
        output_folder = Path(output_folder)

        input_url = await self._upload(file_path)
        job_id = await self._submit(file_path, input_url)
        self._log(f"{file_path.name}: submitted job {job_id}")

        try:
            job = await self._wait_for_completion(job_id, file_path)
            manifest = await self._download_results(job, file_path, output_folder)
        finally:
            await self._cleanup(job_id)

        self._log(f"{file_path.name}: downloaded {len(manifest)} artifacts to {output_folder}")
        return manifest

    async def _upload(self, file_path: Path) -> str:
        try:
            slot = await asyncio.to_thread(self._client.request_upload_slot)
            await asyncio.to_thread(self._put_file, slot.upload_url, file_path)
        except Exception as e:
            raise UploadError(f"Upload of {file_path.name} failed: {e}") from e

        self._logger.debug(f"Uploaded {file_path.name}")
        return slot.download_url

    def _put_file(self, upload_url: str, file_path: Path) -> None:
        with open(file_path, 'rb') as stream:
            self._client.put_file(upload_url, stream)

    async def _submit(self, file_path: Path, input_url: str) -> str:
        try:
            return await asyncio.to_thread(
                self._client.create_job,
                file_path.name,
                self.workflow_id,
                {'inputUrl': input_url},
            )
        except Exception as e:
            raise SubmissionError(f"Job submission for {file_path.name} failed: {e}") from e

    async def _wait_for_completion(self, job_id: str, file_path: Path) -> RemoteJob:
        """Poll until the job is SUCCEEDED or FAILED."""
        loop = asyncio.get_running_loop()
        started = loop.time()

        while True:
            try:
                job = await asyncio.to_thread(self._client.get_job, job_id)
            except Exception as e:
                raise RemoteProcessingError(f"Polling job {job_id} failed: {e}") from e

            if job.status == RemoteJobStatus.SUCCEEDED:
                return job
            if job.status == RemoteJobStatus.FAILED:
                detail = f": {job.error}" if job.error else ""
                raise RemoteProcessingError(f"Job {job_id} for {file_path.name} failed{detail}")

            elapsed = loop.time() - started
            if self.poll_timeout is not None and elapsed >= self.poll_timeout:
                raise JobTimeoutError(
                    f"Job {job_id} for {file_path.name} still {job.status.value} after {elapsed:.0f}s"
                )

            self._logger.debug(f"Job {job_id} status: {job.status.value} (elapsed: {elapsed:.0f}s)")
            await asyncio.sleep(self.poll_interval)

    async def _download_results(self, job: RemoteJob, file_path: Path, output_folder: Path) -> Manifest:
        inline = job.inline_results()
        if inline:
            self._log(f"{file_path.name}: inline results {inline}")

        artifacts: Dict[str, str] = job.downloadable_results()
        if not artifacts:
            return {}

        self._filesystem.ensure_folder(output_folder)
        targets = {name: output_folder / artifact_filename(name, url) for name, url in artifacts.items()}

        results = await asyncio.gather(
            *(
                asyncio.to_thread(self._downloader.download, url, targets[name])
                for name, url in artifacts.items()
            ),
            return_exceptions=True,
        )

        failures = [(name, r) for name, r in zip(artifacts, results) if isinstance(r, BaseException)]
        if failures:
            name, error = failures[0]
            raise DownloadError(
                f"{len(failures)} of {len(artifacts)} artifacts failed for {file_path.name} "
                f"({name}: {error})"
            ) from error

        return {name: Path(path) for name, path in zip(artifacts, results)}

    async def _cleanup(self, job_id: str) -> None:
        """Best-effort job deletion; failures are only logged."""
        try:
            await asyncio.to_thread(self._client.delete_job, job_id)
        except Exception as e:
            error = CleanupError(f"Failed to delete job {job_id}: {e}")
            self._logger.warning(str(error))
            self._log(str(error))

    def _log(self, message: str) -> None:
        report_log(self._on_log, message, logger=self._logger)
