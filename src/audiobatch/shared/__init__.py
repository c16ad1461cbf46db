"""Shared utilities package."""

from audiobatch.shared.logging import setup_logger, get_logger
from audiobatch.shared.metrics import MetricsCollector
from audiobatch.shared.types import JsonDict, PathLike

__all__ = [
    "setup_logger",
    "get_logger",
    "MetricsCollector",
    "PathLike",
    "JsonDict",
]
