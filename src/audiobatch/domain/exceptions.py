"""Domain exceptions for the batch job pipeline."""

from typing import Optional


class DomainException(Exception):
    """Base exception for all domain errors."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration is invalid."""
    pass


class ApiError(DomainException):
    """Raised when a remote job API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UploadError(DomainException):
    """Raised when an input file cannot be uploaded."""
    pass


class SubmissionError(DomainException):
    """Raised when a job cannot be created."""
    pass


class RemoteProcessingError(DomainException):
    """Raised when the remote job fails or cannot be polled."""
    pass


class JobTimeoutError(RemoteProcessingError):
    """Raised when a job does not finish within the poll timeout."""
    pass


class DownloadError(DomainException):
    """Raised when a result artifact cannot be downloaded."""
    pass


class CleanupError(DomainException):
    """Raised when a remote job cannot be deleted. Logged, never escalated."""
    pass
