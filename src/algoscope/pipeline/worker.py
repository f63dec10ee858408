from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass

from ..analysis import analyze
from ..config import AnalysisConfig
from .ports import AnalysisRecord, NotFoundError, ResultSink, SourceFetcher, StorageUnavailableError
from .queue import WorkQueue

_POLL_INTERVAL = 0.1


def analyze_submission(submission_id: str, fetcher: SourceFetcher, sink: ResultSink) -> AnalysisRecord:
    """Fetch one submission, analyze it and persist the result.

    Safe to repeat for the same id: the sink keeps one analysis per
    submission, drops the links of the analysis it replaces and creates
    pattern definitions and links only if absent.
    """
    submission = fetcher.fetch(submission_id)
    result = analyze(submission.source_code)

    record = AnalysisRecord(
        submission_id=submission.id,
        time_complexity=result.time_complexity,
        space_complexity=result.space_complexity,
        patterns=result.patterns,
    )
    sink.store_analysis(record)

    for name in result.patterns:
        pattern_id = sink.ensure_pattern(name)
        sink.link_pattern(submission.id, pattern_id)

    logging.info(f"analysis stored for submission {submission.id}")
    return record


@dataclass
class WorkerStats:
    processed: int = 0
    failed: int = 0
    retried: int = 0


class WorkerPool:
    def __init__(
        self,
        work_queue: WorkQueue,
        fetcher: SourceFetcher,
        sink: ResultSink,
        config: AnalysisConfig | None = None,
    ) -> None:
        self.queue = work_queue
        self.fetcher = fetcher
        self.sink = sink
        self.config = config or AnalysisConfig()
        self.stats = WorkerStats()
        self._stats_lock = threading.Lock()
        self._executor: concurrent.futures.ThreadPoolExecutor | None = None
        self._futures: list[concurrent.futures.Future] = []

    def start(self) -> None:
        if self._executor is not None:
            raise RuntimeError("worker pool already started")
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.config.workers,
            thread_name_prefix="algoscope-worker",
        )
        self._futures = [self._executor.submit(self._run, worker_id) for worker_id in range(self.config.workers)]

    def wait_idle(self) -> None:
        self.queue.join()

    def stop(self, timeout: float | None = None) -> None:
        self.queue.close()
        if self._executor is None:
            return
        done, not_done = concurrent.futures.wait(self._futures, timeout=timeout)
        for future in done:
            if future.exception() is not None:
                logging.error(f"analysis worker exited with an error: {future.exception()}")
        if not_done:
            logging.warning(f"{len(not_done)} analysis worker(s) still running after stop")
        self._executor.shutdown(wait=False)
        self._executor = None
        self._futures = []

    def _count(self, field_name: str) -> None:
        with self._stats_lock:
            setattr(self.stats, field_name, getattr(self.stats, field_name) + 1)

    def _run(self, worker_id: int) -> None:
        logging.info(f"analysis worker {worker_id} started")
        while True:
            submission_id = self.queue.get(timeout=_POLL_INTERVAL)
            if submission_id is None:
                if self.queue.closed:
                    break
                continue
            ok = False
            try:
                logging.debug(f"worker {worker_id} processing submission {submission_id}")
                ok = self._process(submission_id)
            except Exception:
                logging.exception(f"worker {worker_id} failed on submission {submission_id}")
            finally:
                self._count("processed" if ok else "failed")
                self.queue.task_done()
        logging.info(f"analysis worker {worker_id} stopped")

    def _process(self, submission_id: str) -> bool:
        attempts = self.config.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                analyze_submission(submission_id, self.fetcher, self.sink)
                return True
            except NotFoundError as e:
                logging.warning(f"skipping submission {submission_id}: {e}")
                return False
            except StorageUnavailableError as e:
                if attempt == attempts:
                    logging.error(f"giving up on submission {submission_id} after {attempts} attempts: {e}")
                    return False
                logging.warning(f"storage unavailable for submission {submission_id} (attempt {attempt}/{attempts}): {e}")
                self._count("retried")
                time.sleep(self.config.retry_delay)
            except Exception:
                logging.exception(f"unexpected failure analyzing submission {submission_id}")
                return False
        return False
