"""Local filesystem access."""

from pathlib import Path
from typing import Iterable, List, Union

from audiobatch.shared.logging import get_logger
from audiobatch.shared.types import PathLike


class LocalFileSystem:
    """
    Thin wrapper over pathlib used by the pipeline and downloader.
    Implements IFileSystem protocol.
    """

    def __init__(self):
        self._logger = get_logger(__name__)

    def ensure_folder(self, path: PathLike) -> Path:
        """Create folder and any missing parents."""
        folder = Path(path)
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    def write_file(self, path: PathLike, data: Union[bytes, Iterable[bytes]]) -> int:
        """
        Write bytes to ``path``, creating the parent folder.

        Args:
            path: Destination file
            data: Bytes, or an iterable of byte chunks (empty chunks are skipped)

        Returns:
            Number of bytes written
        """
        destination = Path(path)
        self.ensure_folder(destination.parent)

        chunks = [data] if isinstance(data, (bytes, bytearray)) else data
        written = 0
        with open(destination, 'wb') as f:
            for chunk in chunks:
                if chunk:
                    f.write(chunk)
                    written += len(chunk)

        self._logger.debug(f"Wrote {written} bytes to {destination}")
        return written

    def list_files(self, folder: PathLike, extensions: Iterable[str]) -> List[Path]:
        """
        List immediate files in ``folder`` whose extension is in ``extensions``.

        Matching is case-insensitive; results are sorted by name.
        """
        wanted = {ext.lower().lstrip('.') for ext in extensions}
        folder = Path(folder)
        return sorted(
            (
                item for item in folder.iterdir()
                if item.is_file() and item.suffix.lower().lstrip('.') in wanted
            ),
            key=lambda p: p.name
        )
