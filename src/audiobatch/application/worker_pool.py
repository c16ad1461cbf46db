"""Bounded-concurrency worker pool for asyncio tasks."""

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Hashable, List, Optional, Set, Tuple

from audiobatch.shared.logging import get_logger

logger = get_logger(__name__)


TaskFactory = Callable[[], Awaitable[Any]]


class AdmissionGate:
    """Counting gate: at most ``capacity`` holders at a time."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Capacity must be at least 1, got: {capacity}")
        self.capacity = capacity
        self._active = 0
        self._peak = 0

    @property
    def active(self) -> int:
        return self._active

    @property
    def peak(self) -> int:
        """Highest number of simultaneous holders seen so far."""
        return self._peak

    def try_admit(self) -> bool:
        if self._active >= self.capacity:
            return False
        self._active += 1
        self._peak = max(self._peak, self._active)
        return True

    def release(self) -> None:
        if self._active == 0:
            raise RuntimeError("release() called without a matching admission")
        self._active -= 1


class CompletionBarrier:
    """Resolves once every expected unit has arrived."""

    def __init__(self):
        self._expected = 0
        self._arrived = 0
        self._done = asyncio.Event()
        self._done.set()

    @property
    def pending(self) -> int:
        return self._expected - self._arrived

    def expect(self, count: int = 1) -> None:
        self._expected += count
        if self.pending > 0:
            self._done.clear()

    def arrive(self, count: int = 1) -> None:
        self._arrived += count
        if self.pending <= 0:
            self._done.set()

    async def wait(self) -> None:
        await self._done.wait()


class WorkerPool:
    """
    FIFO worker pool built from an AdmissionGate and a CompletionBarrier.

    Submitted units wait in a backlog until a slot frees. When the cancel
    signal is set (or ``cancel()`` is called) the backlog is dropped at the
    next admission point; running units are never interrupted.

    Must be used from inside a running event loop.
    """

    def __init__(self, capacity: int = 5, cancel_signal: Optional[asyncio.Event] = None):
        self._gate = AdmissionGate(capacity)
        self._barrier = CompletionBarrier()
        self._backlog: Deque[Tuple[Hashable, TaskFactory]] = deque()
        self._running: Set[asyncio.Task] = set()
        self._skipped: List[Hashable] = []
        self._cancel_signal = cancel_signal
        self._closed = False
        self._completed = 0
        self._failures = 0

    @property
    def capacity(self) -> int:
        return self._gate.capacity

    @property
    def active(self) -> int:
        return self._gate.active

    @property
    def peak(self) -> int:
        return self._gate.peak

    @property
    def backlog(self) -> int:
        return len(self._backlog)

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def failures(self) -> int:
        """Units that raised instead of handling their own errors."""
        return self._failures

    @property
    def cancelled(self) -> bool:
        return self._closed or (self._cancel_signal is not None and self._cancel_signal.is_set())

    def submit(self, key: Hashable, factory: TaskFactory) -> None:
        """Queue a unit of work; ``factory`` is called only once admitted."""
        self._barrier.expect()
        self._backlog.append((key, factory))
        self._pump()

    def cancel(self) -> None:
        """Stop admitting work and drop the backlog."""
        self._closed = True
        self._pump()

    async def drain(self) -> List[Hashable]:
        """
        Wait until every submitted unit has finished or been skipped.

        Returns:
            Keys of the units skipped because of cancellation, in submission order
        """
        self._pump()
        watcher = None
        if self._cancel_signal is not None and not self._cancel_signal.is_set():
            watcher = asyncio.create_task(self._watch_cancel_signal())
        try:
            await self._barrier.wait()
        finally:
            if watcher is not None:
                watcher.cancel()
        return list(self._skipped)

    async def _watch_cancel_signal(self) -> None:
        await self._cancel_signal.wait()
        self._pump()

    def _pump(self) -> None:
        """Admit backlog units while slots are free."""
        if self.cancelled:
            self._skip_backlog()
            return

        while self._backlog and self._gate.try_admit():
            key, factory = self._backlog.popleft()
            task = asyncio.create_task(self._run(key, factory), name=f"worker:{key}")
            self._running.add(task)
            task.add_done_callback(self._running.discard)

    def _skip_backlog(self) -> None:
        if not self._backlog:
            return
        skipped = [key for key, _ in self._backlog]
        self._backlog.clear()
        self._skipped.extend(skipped)
        logger.info(f"Skipped {len(skipped)} queued tasks after cancellation")
        self._barrier.arrive(len(skipped))

    async def _run(self, key: Hashable, factory: TaskFactory) -> None:
        try:
            await factory()
        except Exception:
            self._failures += 1
            logger.exception(f"Unhandled error in worker task {key}")
        finally:
            self._gate.release()
            self._completed += 1
            self._barrier.arrive()
            self._pump()
