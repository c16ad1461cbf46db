"""Tests for HttpDownloader."""

import pytest
import requests
from unittest.mock import MagicMock, Mock, patch

from audiobatch.infrastructure.io.downloader import HttpDownloader
from audiobatch.domain.exceptions import DownloadError


def make_response(chunks=(b'test', b'data'), error=None):
    """Build a mocked response usable as ``with requests.get(...) as response``."""
    response = MagicMock()
    response.iter_content = Mock(return_value=list(chunks))
    response.raise_for_status = Mock(side_effect=error)
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


class TestHttpDownloader:

    @patch('audiobatch.infrastructure.io.downloader.requests.get')
    def test_http_download(self, mock_get, tmp_path):
        mock_get.return_value = make_response()
        downloader = HttpDownloader(timeout=30, chunk_size=4)

        dest = tmp_path / "song.mp3" / "vocals.wav"
        result = downloader.download("https://cdn.example.com/vocals.wav", dest)

        assert result == dest
        assert dest.read_bytes() == b'testdata'
        mock_get.assert_called_once_with(
            "https://cdn.example.com/vocals.wav", stream=True, timeout=30
        )

    @patch('audiobatch.infrastructure.io.downloader.requests.get')
    def test_http_error(self, mock_get, tmp_path):
        mock_get.return_value = make_response(error=requests.HTTPError("404 Not Found"))

        with pytest.raises(DownloadError, match="404"):
            HttpDownloader().download("https://cdn.example.com/missing.wav", tmp_path / "out.wav")

        assert not (tmp_path / "out.wav").exists()

    @patch('audiobatch.infrastructure.io.downloader.requests.get')
    def test_interrupted_stream_removes_partial_file(self, mock_get, tmp_path):
        def chunks(chunk_size):
            yield b'part'
            raise requests.ConnectionError("connection reset")

        response = make_response()
        response.iter_content = chunks
        mock_get.return_value = response
        dest = tmp_path / "out.wav"

        with pytest.raises(DownloadError, match="connection reset"):
            HttpDownloader().download("https://cdn.example.com/vocals.wav", dest)

        assert not dest.exists()

    @pytest.mark.parametrize("url", [
        "file:///tmp/vocals.wav",
        "/tmp/vocals.wav",
        "s3://bucket/vocals.wav",
    ])
    @patch('audiobatch.infrastructure.io.downloader.requests.get')
    def test_rejects_non_http_urls(self, mock_get, url, tmp_path):
        with pytest.raises(DownloadError, match="Unsupported URL scheme"):
            HttpDownloader().download(url, tmp_path / "out.wav")

        mock_get.assert_not_called()
