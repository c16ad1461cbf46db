"""Accumulation of per-file manifests into a batch result."""

import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from audiobatch.domain.models import BatchResult, Manifest, ProgressSnapshot


class ResultCollector:
    """Append-only, thread-safe store of manifests in completion order."""

    def __init__(self):
        self._lock = threading.Lock()
        self._files: List[Path] = []
        self._manifests: List[Manifest] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._manifests)

    def add(self, file_path: Path, manifest: Manifest) -> None:
        with self._lock:
            self._files.append(Path(file_path))
            self._manifests.append(dict(manifest))

    def build(self, snapshot: ProgressSnapshot, metrics: Optional[Dict[str, Any]] = None) -> BatchResult:
        """Freeze the collected manifests into a BatchResult."""
        with self._lock:
            return BatchResult(
                manifests=list(self._manifests),
                files=list(self._files),
                snapshot=snapshot,
                metrics=dict(metrics or {}),
            )
