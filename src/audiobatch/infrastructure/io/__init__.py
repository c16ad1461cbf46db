"""IO utilities package."""

from audiobatch.infrastructure.io.downloader import HttpDownloader

__all__ = ["HttpDownloader"]
