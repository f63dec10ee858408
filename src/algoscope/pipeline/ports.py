from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable


class CollaboratorError(Exception):
    pass


class NotFoundError(CollaboratorError):
    pass


class StorageUnavailableError(CollaboratorError):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Submission:
    id: str
    user_id: str
    source_code: str
    language: str = ""


@dataclass(frozen=True)
class AnalysisRecord:
    submission_id: str
    time_complexity: str
    space_complexity: str
    patterns: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class PatternFact:
    user_id: str
    pattern: str


@dataclass(frozen=True)
class StoredEdge:
    id: str
    user_a: str
    user_b: str
    similarity: float
    created_at: datetime

    def other(self, user_id: str) -> str:
        return self.user_b if self.user_a == user_id else self.user_a


@runtime_checkable
class SourceFetcher(Protocol):
    def fetch(self, submission_id: str) -> Submission: ...


@runtime_checkable
class ResultSink(Protocol):
    def store_analysis(self, record: AnalysisRecord) -> bool: ...

    def ensure_pattern(self, name: str) -> str: ...

    def link_pattern(self, submission_id: str, pattern_id: str) -> bool: ...


@runtime_checkable
class FactSource(Protocol):
    def iter_pattern_facts(self) -> Iterable[PatternFact]: ...

    def patterns_for_user(self, user_id: str) -> list[str]: ...


@runtime_checkable
class EdgeStore(Protocol):
    def upsert_edge(self, user_a: str, user_b: str, similarity: float) -> bool: ...

    def delete_edges_except(self, keep: set[tuple[str, str]]) -> int: ...

    def edges_for_user(self, user_id: str, limit: int) -> list[StoredEdge]: ...


def pair_key(user_a: str, user_b: str) -> tuple[str, str]:
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)
