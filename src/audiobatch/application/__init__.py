"""Application layer package."""

from audiobatch.application.worker_pool import AdmissionGate, CompletionBarrier, WorkerPool
from audiobatch.application.progress import ProgressTracker
from audiobatch.application.results import ResultCollector
from audiobatch.application.pipeline import FilePipeline
from audiobatch.application.scheduler import BatchScheduler
from audiobatch.application.service import process_file, process_folder, run_batch

__all__ = [
    "AdmissionGate",
    "CompletionBarrier",
    "WorkerPool",
    "ProgressTracker",
    "ResultCollector",
    "FilePipeline",
    "BatchScheduler",
    "process_file",
    "process_folder",
    "run_batch",
]
