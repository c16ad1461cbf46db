"""Per-file progress tracking for a batch run."""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

from audiobatch.domain.models import LocalFileStatus, ProgressSnapshot
from audiobatch.domain.protocols import ProgressCallback
from audiobatch.application.callbacks import invoke_callback
from audiobatch.shared.logging import get_logger
from audiobatch.shared.types import PathLike


class ProgressTracker:
    """
    Authoritative status of every discovered file.

    ``record_status`` never raises: a tracking problem is logged and the
    file keeps processing. Each accepted change awaits the progress callback
    with a fresh snapshot, so callbacks for one file arrive in the order
    its statuses were recorded.
    """

    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_error: Optional[Callable[[str], Any]] = None
    ):
        self._on_progress = on_progress
        self._on_error = on_error
        self._statuses: Dict[Path, LocalFileStatus] = {}
        self._logger = get_logger(__name__)

    def __len__(self) -> int:
        return len(self._statuses)

    def __contains__(self, file_path: PathLike) -> bool:
        return Path(file_path) in self._statuses

    def status_of(self, file_path: PathLike) -> Optional[LocalFileStatus]:
        return self._statuses.get(Path(file_path))

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot.from_statuses(self._statuses)

    async def record_status(self, file_path: PathLike, status: LocalFileStatus) -> bool:
        """
        Upsert the status of ``file_path`` and notify the progress callback.

        Repeating the current status is a no-op. Transitions the file state
        machine does not allow are logged and ignored.

        Returns:
            True if the status changed
        """
        try:
            path = Path(file_path)
            status = LocalFileStatus(status)
            current = self._statuses.get(path)

            if current == status:
                return False
            if current is not None and not current.can_transition_to(status):
                self._logger.warning(
                    f"Ignoring invalid transition for {path.name}: {current.value} -> {status.value}"
                )
                return False

            self._statuses[path] = status
            snapshot = self.snapshot()
        except Exception:
            self._logger.exception(f"Failed to record status {status} for {file_path}")
            return False

        self._logger.debug(f"{path.name}: {status.value}")
        await invoke_callback(
            self._on_progress, path, status, snapshot,
            logger=self._logger, on_error=self._on_error
        )
        return True
