"""Batch processing of local audio files through a remote job API."""

from audiobatch.domain import (
    BatchResult,
    LocalFileStatus,
    ProgressSnapshot,
    RemoteJobStatus,
    DomainException,
    ConfigurationError,
    UploadError,
    SubmissionError,
    RemoteProcessingError,
    DownloadError,
    CleanupError,
)
from audiobatch.application import process_file, process_folder

__version__ = "0.1.0"

__all__ = [
    "process_file",
    "process_folder",
    "BatchResult",
    "LocalFileStatus",
    "ProgressSnapshot",
    "RemoteJobStatus",
    "DomainException",
    "ConfigurationError",
    "UploadError",
    "SubmissionError",
    "RemoteProcessingError",
    "DownloadError",
    "CleanupError",
]
