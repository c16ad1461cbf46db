"""Domain models for batch job processing."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


SUPPORTED_EXTENSIONS: Tuple[str, ...] = ('mp3', 'wav', 'm4a')

# artifact name -> local downloaded path
Manifest = Dict[str, Path]


class RemoteJobStatus(str, Enum):
    """Job state as reported by the remote API."""

    QUEUED = 'QUEUED'
    STARTED = 'STARTED'
    PENDING = 'PENDING'
    PROCESSING = 'PROCESSING'
    SUCCEEDED = 'SUCCEEDED'
    FAILED = 'FAILED'
    DELETED = 'DELETED'
    CANCELLED = 'CANCELLED'

    @property
    def is_terminal(self) -> bool:
        return self in (RemoteJobStatus.SUCCEEDED, RemoteJobStatus.FAILED)


class LocalFileStatus(str, Enum):
    """Engine-owned status of one input file."""

    PENDING = 'PENDING'
    PROCESSING = 'PROCESSING'
    SUCCEEDED = 'SUCCEEDED'
    FAILED = 'FAILED'
    ABORTED = 'ABORTED'

    @property
    def is_terminal(self) -> bool:
        return self in (
            LocalFileStatus.SUCCEEDED,
            LocalFileStatus.FAILED,
            LocalFileStatus.ABORTED,
        )

    def can_transition_to(self, other: 'LocalFileStatus') -> bool:
        """Check whether moving from this status to ``other`` is allowed."""
        return other in _TRANSITIONS[self]


_TRANSITIONS = {
    LocalFileStatus.PENDING: (LocalFileStatus.PROCESSING, LocalFileStatus.ABORTED),
    LocalFileStatus.PROCESSING: (LocalFileStatus.SUCCEEDED, LocalFileStatus.FAILED),
    LocalFileStatus.SUCCEEDED: (),
    LocalFileStatus.FAILED: (),
    LocalFileStatus.ABORTED: (),
}


@dataclass
class FileTask:
    """One unit of work: an input file and where its results go."""

    file_path: Path
    output_folder: Path
    status: LocalFileStatus = LocalFileStatus.PENDING
    error: Optional[str] = None

    @classmethod
    def for_file(cls, file_path: Path, output_root: Path) -> 'FileTask':
        """Create a task whose output folder is named after the file (extension included)."""
        file_path = Path(file_path)
        return cls(file_path=file_path, output_folder=Path(output_root) / file_path.name)


class ProgressSnapshot(Mapping):
    """
    Read-only view of every tracked file grouped by status.

    Every status is present as a key; each file appears in exactly one bucket.
    """

    def __init__(self, buckets: Mapping[LocalFileStatus, Tuple[Path, ...]]):
        self._buckets = MappingProxyType({
            status: tuple(buckets.get(status, ())) for status in LocalFileStatus
        })

    @classmethod
    def from_statuses(cls, statuses: Mapping[Path, LocalFileStatus]) -> 'ProgressSnapshot':
        """Build a snapshot from an ordered file -> status mapping."""
        buckets: Dict[LocalFileStatus, List[Path]] = {status: [] for status in LocalFileStatus}
        for path, status in statuses.items():
            buckets[status].append(path)
        return cls({status: tuple(paths) for status, paths in buckets.items()})

    def __getitem__(self, status: LocalFileStatus) -> Tuple[Path, ...]:
        return self._buckets[status]

    def __iter__(self) -> Iterator[LocalFileStatus]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def files(self, status: LocalFileStatus) -> Tuple[Path, ...]:
        return self._buckets[status]

    def counts(self) -> Dict[str, int]:
        return {status.value: len(paths) for status, paths in self._buckets.items()}

    @property
    def total(self) -> int:
        return sum(len(paths) for paths in self._buckets.values())

    @property
    def is_complete(self) -> bool:
        """True when no file is waiting or in flight."""
        return not self._buckets[LocalFileStatus.PENDING] and not self._buckets[LocalFileStatus.PROCESSING]

    def __repr__(self) -> str:
        return f"ProgressSnapshot({self.counts()})"


class UploadSlot(BaseModel):
    """Pre-signed upload target returned by the API."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    upload_url: str = Field(alias='uploadUrl')
    download_url: str = Field(alias='downloadUrl')


class RemoteJob(BaseModel):
    """Remote job as returned by the API. The engine only keeps its id."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore', coerce_numbers_to_str=True)

    id: str
    status: RemoteJobStatus
    name: Optional[str] = None
    workflow: Optional[str] = None
    input_url: Optional[str] = Field(default=None, alias='inputUrl')
    result: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[Any] = None

    @model_validator(mode='before')
    @classmethod
    def _lift_input_url(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            params = data.get('params') or {}
            if 'inputUrl' not in data and isinstance(params, dict) and params.get('inputUrl'):
                data['inputUrl'] = params['inputUrl']
            if data.get('result') is None:
                data['result'] = {}
        return data

    def downloadable_results(self) -> Dict[str, str]:
        """Result entries whose value is a remote URL."""
        return {name: value for name, value in self.result.items() if is_remote_url(value)}

    def inline_results(self) -> Dict[str, Any]:
        """Result entries that are plain values, not URLs."""
        return {name: value for name, value in self.result.items() if not is_remote_url(value)}


def is_remote_url(value: Any) -> bool:
    """Check if a result value points at a downloadable http(s) resource."""
    return isinstance(value, str) and value.lower().startswith(('http://', 'https://'))


@dataclass
class BatchResult:
    """Outcome of a batch run: one manifest per succeeded file, in completion order."""

    manifests: List[Manifest] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)
    snapshot: ProgressSnapshot = field(default_factory=lambda: ProgressSnapshot({}))
    metrics: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.manifests)

    def __iter__(self) -> Iterator[Manifest]:
        return iter(self.manifests)

    def manifest_for(self, file_path: Path) -> Optional[Manifest]:
        """Return the manifest produced for ``file_path``, if it succeeded."""
        for source, manifest in zip(self.files, self.manifests):
            if source == Path(file_path):
                return manifest
        return None

    @property
    def succeeded(self) -> Tuple[Path, ...]:
        return self.snapshot.files(LocalFileStatus.SUCCEEDED)

    @property
    def failed(self) -> Tuple[Path, ...]:
        return self.snapshot.files(LocalFileStatus.FAILED)
