"""Domain layer package."""

from .models import (
    SUPPORTED_EXTENSIONS,
    BatchResult,
    FileTask,
    LocalFileStatus,
    Manifest,
    ProgressSnapshot,
    RemoteJob,
    RemoteJobStatus,
    UploadSlot,
)
from .exceptions import (
    DomainException,
    ConfigurationError,
    ApiError,
    UploadError,
    SubmissionError,
    RemoteProcessingError,
    JobTimeoutError,
    DownloadError,
    CleanupError,
)
from .protocols import (
    IJobClient,
    IDownloader,
    IFileSystem,
    ProgressCallback,
    MessageCallback,
)

__all__ = [
    # Models
    "SUPPORTED_EXTENSIONS",
    "BatchResult",
    "FileTask",
    "LocalFileStatus",
    "Manifest",
    "ProgressSnapshot",
    "RemoteJob",
    "RemoteJobStatus",
    "UploadSlot",
    # Exceptions
    "DomainException",
    "ConfigurationError",
    "ApiError",
    "UploadError",
    "SubmissionError",
    "RemoteProcessingError",
    "JobTimeoutError",
    "DownloadError",
    "CleanupError",
    # Protocols
    "IJobClient",
    "IDownloader",
    "IFileSystem",
    "ProgressCallback",
    "MessageCallback",
]
