"""Protocol definitions for dependency inversion."""

from pathlib import Path
from typing import Any, Awaitable, BinaryIO, Callable, Iterable, List, Optional, Protocol, Union

from audiobatch.shared.types import JsonDict
from .models import LocalFileStatus, ProgressSnapshot, RemoteJob, UploadSlot


# on_progress may be a plain function or a coroutine function
ProgressCallback = Callable[[Path, LocalFileStatus, ProgressSnapshot], Optional[Awaitable[None]]]
MessageCallback = Callable[[str], Any]


class IJobClient(Protocol):
    """Interface for the remote job API."""

    def request_upload_slot(self) -> UploadSlot:
        """Obtain a pre-signed upload URL and the matching download URL."""
        ...

    def put_file(self, upload_url: str, stream: BinaryIO) -> None:
        """Upload file contents to a pre-signed URL."""
        ...

    def create_job(self, name: str, workflow_id: str, params: JsonDict) -> str:
        """Create a job and return its id."""
        ...

    def get_job(self, job_id: str) -> RemoteJob:
        """Fetch current job state."""
        ...

    def delete_job(self, job_id: str) -> None:
        """Delete a job."""
        ...


class IDownloader(Protocol):
    """Interface for downloading result artifacts."""

    def download(self, url: str, destination: Path) -> Path:
        """Download a file from URL to destination."""
        ...


class IFileSystem(Protocol):
    """Interface for local filesystem access."""

    def ensure_folder(self, path: Path) -> Path:
        """Create a folder (and parents) if missing."""
        ...

    def write_file(self, path: Path, data: Union[bytes, Iterable[bytes]]) -> int:
        """Write bytes to a file, returning the number of bytes written."""
        ...

    def list_files(self, folder: Path, extensions: Iterable[str]) -> List[Path]:
        """List immediate files in folder matching the given extensions."""
        ...
