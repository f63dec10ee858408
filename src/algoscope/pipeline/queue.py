from __future__ import annotations

import queue
import threading

_CLOSED = object()


class QueueUnavailableError(Exception):
    pass


class WorkQueue:
    """Channel of submission ids from submit time to the analysis workers.

    Delivery is at-least-once: producers may enqueue the same id again, so
    consumers must tolerate seeing it more than once.
    ``close`` wakes every blocked consumer; ``get`` then returns ``None``.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue[object] = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def put(self, submission_id: str, timeout: float | None = None) -> None:
        if self.closed:
            raise QueueUnavailableError("work queue is closed")
        try:
            self._queue.put(submission_id, timeout=timeout)
        except queue.Full as e:
            raise QueueUnavailableError(f"work queue is full, could not enqueue {submission_id}") from e

    def get(self, timeout: float | None = None) -> str | None:
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            # Keep the sentinel visible to the other consumers.
            self._queue.task_done()
            self._queue.put(_CLOSED)
            return None
        return str(item)

    def task_done(self) -> None:
        self._queue.task_done()

    def join(self) -> None:
        # Only meaningful before close: the close sentinel stays unfinished.
        self._queue.join()

    def close(self) -> None:
        if not self.closed:
            self._closed.set()
            self._queue.put(_CLOSED)

    def qsize(self) -> int:
        return self._queue.qsize()
