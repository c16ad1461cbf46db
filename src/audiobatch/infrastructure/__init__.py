"""Infrastructure layer package."""

from audiobatch.infrastructure.api import JobApiClient
from audiobatch.infrastructure.config import BatchConfig, ConfigLoader
from audiobatch.infrastructure.io import HttpDownloader
from audiobatch.infrastructure.storage import LocalFileSystem

__all__ = [
    "JobApiClient",
    "BatchConfig",
    "ConfigLoader",
    "HttpDownloader",
    "LocalFileSystem",
]
