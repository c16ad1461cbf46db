"""Per-batch metrics: durations, sampled values and counters."""

import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List


def summarize(values: List[float]) -> Dict[str, float]:
    """count/sum/avg/min/max of a non-empty numeric series."""
    total = sum(values)
    return {
        "count": len(values),
        "sum": total,
        "avg": total / len(values),
        "min": min(values),
        "max": max(values),
    }


class MetricsCollector:
    """
    Collects numeric samples and counters for one batch run.

    Durations are measured with ``measure()``, which is safe to nest and to
    use from concurrent pipelines because each measurement keeps its own
    start time instead of a shared named timer.
    """

    def __init__(self):
        self._start_time = time.monotonic()
        self._samples: Dict[str, List[float]] = defaultdict(list)
        self._counters: Dict[str, int] = defaultdict(int)

    @contextmanager
    def measure(self, metric: str) -> Iterator[None]:
        """Record the wall time of the ``with`` block under ``metric``, even if it raises."""
        started = time.monotonic()
        try:
            yield
        finally:
            self.record_metric(metric, time.monotonic() - started)

    def record_metric(self, name: str, value: float) -> None:
        self._samples[name].append(value)

    def increment_counter(self, name: str, amount: int = 1) -> None:
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_metric(self, name: str) -> List[float]:
        return list(self._samples.get(name, []))

    def elapsed_time(self) -> float:
        """Seconds since the collector was created."""
        return time.monotonic() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        """
        Snapshot of everything collected so far.

        Returns:
            ``{"total_elapsed": float, "counters": {...}, "metrics": {name: summarize(values)}}``
        """
        return {
            "total_elapsed": self.elapsed_time(),
            "counters": dict(self._counters),
            "metrics": {
                name: summarize(values)
                for name, values in self._samples.items()
                if values
            },
        }
