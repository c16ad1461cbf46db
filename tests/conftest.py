import os
import sys
import threading
import time
from pathlib import Path

import pytest

# Make the package importable without installation
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from audiobatch.domain.exceptions import ApiError, DownloadError
from audiobatch.domain.models import RemoteJob, RemoteJobStatus, UploadSlot


DEFAULT_RESULT = {"outputUrl": "https://x/y/out.wav", "label": "drums"}


class FakeJobClient:
    """In-memory job API. Thread-safe because the pipeline calls it from worker threads."""

    def __init__(
        self,
        result=None,
        statuses=(),
        fail_upload_for=(),
        fail_job_for=(),
        fail_create_for=(),
        delete_error=None,
        delay=0.0
    ):
        self.result = dict(DEFAULT_RESULT if result is None else result)
        self.statuses = list(statuses)
        self.fail_upload_for = set(fail_upload_for)
        self.fail_job_for = set(fail_job_for)
        self.fail_create_for = set(fail_create_for)
        self.delete_error = delete_error
        self.delay = delay

        self._lock = threading.Lock()
        self._slots = 0
        self._polls = {}
        self.uploads = {}
        self.jobs = {}
        self.created = []
        self.deleted = []

    def request_upload_slot(self):
        with self._lock:
            self._slots += 1
            n = self._slots
        return UploadSlot(uploadUrl=f"https://upload.test/{n}", downloadUrl=f"https://input.test/{n}")

    def put_file(self, upload_url, stream):
        name = Path(stream.name).name
        data = stream.read()
        if self.delay:
            time.sleep(self.delay)
        if name in self.fail_upload_for:
            raise ApiError(f"PUT {upload_url} failed", status_code=500)
        with self._lock:
            self.uploads[name] = data

    def create_job(self, name, workflow_id, params):
        if name in self.fail_create_for:
            raise ApiError("POST job failed", status_code=400)
        job_id = f"job-{name}"
        with self._lock:
            self.jobs[job_id] = {"name": name, "workflow": workflow_id, "params": params}
            self.created.append(name)
            self._polls[job_id] = 0
        return job_id

    def get_job(self, job_id):
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            job = self.jobs[job_id]
            poll = self._polls[job_id]
            self._polls[job_id] = poll + 1

        if job["name"] in self.fail_job_for:
            status, error = RemoteJobStatus.FAILED, "workflow error"
        elif poll < len(self.statuses):
            status, error = self.statuses[poll], None
        else:
            status, error = RemoteJobStatus.SUCCEEDED, None

        return RemoteJob.model_validate({
            "id": job_id,
            "name": job["name"],
            "workflow": job["workflow"],
            "status": status.value,
            "params": job["params"],
            "result": self.result if status == RemoteJobStatus.SUCCEEDED else None,
            "error": error,
        })

    def polls(self, job_id):
        return self._polls.get(job_id, 0)

    def delete_job(self, job_id):
        with self._lock:
            self.deleted.append(job_id)
        if self.delete_error is not None:
            raise self.delete_error


class FakeDownloader:
    """Writes the URL text to the destination instead of fetching it."""

    def __init__(self, fail_urls=()):
        self.fail_urls = set(fail_urls)
        self.calls = []
        self._lock = threading.Lock()

    def download(self, url, destination):
        with self._lock:
            self.calls.append((url, Path(destination)))
        if url in self.fail_urls:
            raise DownloadError(f"Failed to download {url}")
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(url.encode())
        return destination


@pytest.fixture
def fake_client():
    return FakeJobClient()


@pytest.fixture
def fake_downloader():
    return FakeDownloader()


@pytest.fixture
def input_folder(tmp_path):
    """Folder with three supported audio files and one unsupported file."""
    folder = tmp_path / "input"
    folder.mkdir()
    for name in ("a.mp3", "b.wav", "c.m4a"):
        (folder / name).write_bytes(f"audio {name}".encode())
    (folder / "notes.txt").write_text("ignore me")
    return folder


@pytest.fixture
def output_folder(tmp_path):
    return tmp_path / "output"


@pytest.fixture
def make_client():
    """Factory for FakeJobClient with custom behaviour."""
    return FakeJobClient


@pytest.fixture
def make_downloader():
    return FakeDownloader
