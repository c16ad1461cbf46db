"""Tests for domain models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from audiobatch.domain.models import (
    BatchResult,
    FileTask,
    LocalFileStatus,
    ProgressSnapshot,
    RemoteJob,
    RemoteJobStatus,
    UploadSlot,
)


class TestStatuses:

    def test_remote_terminal(self):
        assert RemoteJobStatus.SUCCEEDED.is_terminal
        assert RemoteJobStatus.FAILED.is_terminal
        assert not RemoteJobStatus.CANCELLED.is_terminal
        assert not RemoteJobStatus.QUEUED.is_terminal

    def test_local_transitions(self):
        assert LocalFileStatus.PENDING.can_transition_to(LocalFileStatus.PROCESSING)
        assert LocalFileStatus.PENDING.can_transition_to(LocalFileStatus.ABORTED)
        assert LocalFileStatus.PROCESSING.can_transition_to(LocalFileStatus.FAILED)
        assert not LocalFileStatus.PENDING.can_transition_to(LocalFileStatus.SUCCEEDED)
        assert not LocalFileStatus.PROCESSING.can_transition_to(LocalFileStatus.ABORTED)
        assert not LocalFileStatus.SUCCEEDED.can_transition_to(LocalFileStatus.FAILED)


class TestFileTask:

    def test_output_folder_from_stem(self):
        task = FileTask.for_file(Path("/music/in/song.mp3"), Path("/music/out"))
        assert task.output_folder == Path("/music/out/song.mp3")
        assert task.status == LocalFileStatus.PENDING
        assert task.error is None


class TestProgressSnapshot:

    def test_every_status_present(self):
        snapshot = ProgressSnapshot.from_statuses({
            Path("a.mp3"): LocalFileStatus.SUCCEEDED,
            Path("b.mp3"): LocalFileStatus.PENDING,
        })

        assert set(snapshot) == set(LocalFileStatus)
        assert snapshot.files(LocalFileStatus.FAILED) == ()
        assert snapshot.counts()["SUCCEEDED"] == 1
        assert snapshot.total == 2

    def test_preserves_insertion_order(self):
        paths = [Path(f"{n}.wav") for n in "cab"]
        snapshot = ProgressSnapshot.from_statuses({p: LocalFileStatus.PENDING for p in paths})
        assert snapshot[LocalFileStatus.PENDING] == tuple(paths)

    def test_complete(self):
        snapshot = ProgressSnapshot.from_statuses({
            Path("a.mp3"): LocalFileStatus.SUCCEEDED,
            Path("b.mp3"): LocalFileStatus.ABORTED,
        })
        assert snapshot.is_complete


class TestWireModels:

    def test_upload_slot_aliases(self):
        slot = UploadSlot.model_validate({"uploadUrl": "https://u", "downloadUrl": "https://d", "extra": 1})
        assert slot.upload_url == "https://u"
        assert slot.download_url == "https://d"

    def test_remote_job_from_api(self):
        job = RemoteJob.model_validate({
            "id": 42,
            "name": "song.mp3",
            "workflow": "stems",
            "status": "SUCCEEDED",
            "params": {"inputUrl": "https://in/song.mp3"},
            "result": {"vocals": "https://cdn/v.wav", "bpm": 120, "label": "drums"},
            "createdAt": "2024-01-01T00:00:00Z",
        })

        assert job.id == "42"
        assert job.status == RemoteJobStatus.SUCCEEDED
        assert job.input_url == "https://in/song.mp3"
        assert job.downloadable_results() == {"vocals": "https://cdn/v.wav"}
        assert job.inline_results() == {"bpm": 120, "label": "drums"}

    def test_null_result(self):
        job = RemoteJob.model_validate({"id": "j1", "status": "QUEUED", "result": None})
        assert job.result == {}

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            RemoteJob.model_validate({"id": "j1", "status": "EXPLODED"})


class TestBatchResult:

    def test_manifest_lookup(self):
        result = BatchResult(
            manifests=[{"out": Path("/o/a/out.wav")}],
            files=[Path("/i/a.mp3")],
        )
        assert result.manifest_for("/i/a.mp3") == {"out": Path("/o/a/out.wav")}
        assert result.manifest_for("/i/b.mp3") is None
        assert list(result) == [{"out": Path("/o/a/out.wav")}]
        assert result.snapshot.total == 0
