"""HTTP downloader implementation."""

import requests
from pathlib import Path
from typing import Optional

from audiobatch.domain.exceptions import DownloadError
from audiobatch.domain.models import is_remote_url
from audiobatch.infrastructure.storage.filesystem import LocalFileSystem
from audiobatch.shared.logging import get_logger


class HttpDownloader:
    """
    Streams result artifacts over HTTP/HTTPS to local files.
    Implements IDownloader protocol.

    Each download is a standalone ``requests.get`` call, so concurrent
    pipelines never share a connection pool across worker threads.
    """

    def __init__(
        self,
        timeout: int = 600,
        chunk_size: int = 8192,
        filesystem: Optional[LocalFileSystem] = None
    ):
        """
        Initialize HTTP downloader.

        Args:
            timeout: Request timeout in seconds
            chunk_size: Download chunk size in bytes
            filesystem: Filesystem used to write downloaded bytes
        """
        self.timeout = timeout
        self.chunk_size = chunk_size
        self._filesystem = filesystem or LocalFileSystem()
        self._logger = get_logger(__name__)

    def download(self, url: str, destination: Path) -> Path:
        """
        Download file from URL to destination.

        Args:
            url: http(s) URL to download from
            destination: Destination file path

        Returns:
            Path to downloaded file

        Raises:
            DownloadError: If the URL is not http(s) or the download fails
        """
        if not is_remote_url(url):
            raise DownloadError(f"Unsupported URL scheme: {url}")

        destination = Path(destination)
        self._logger.debug(f"Downloading {url} to {destination}")

        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                written = self._filesystem.write_file(
                    destination,
                    response.iter_content(chunk_size=self.chunk_size)
                )
        except requests.RequestException as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"Failed to write {destination}: {e}") from e

        self._logger.debug(f"Downloaded {written} bytes to {destination}")
        return destination
