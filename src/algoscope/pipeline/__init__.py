from __future__ import annotations

from .memory import InMemoryStore
from .ports import (
    AnalysisRecord,
    CollaboratorError,
    EdgeStore,
    FactSource,
    NotFoundError,
    PatternFact,
    ResultSink,
    SourceFetcher,
    StorageUnavailableError,
    StoredEdge,
    Submission,
    pair_key,
)
from .queue import QueueUnavailableError, WorkQueue
from .worker import WorkerPool, WorkerStats, analyze_submission

__all__ = [
    "AnalysisRecord",
    "CollaboratorError",
    "EdgeStore",
    "FactSource",
    "InMemoryStore",
    "NotFoundError",
    "PatternFact",
    "QueueUnavailableError",
    "ResultSink",
    "SourceFetcher",
    "StorageUnavailableError",
    "StoredEdge",
    "Submission",
    "WorkQueue",
    "WorkerPool",
    "WorkerStats",
    "analyze_submission",
    "pair_key",
]
