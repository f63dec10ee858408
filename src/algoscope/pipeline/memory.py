from __future__ import annotations

import threading
import uuid
from collections.abc import Iterator

from .ports import (
    AnalysisRecord,
    NotFoundError,
    PatternFact,
    StoredEdge,
    Submission,
    pair_key,
    utcnow,
)


class InMemoryStore:
    """Thread-safe reference implementation of every storage collaborator.

    Submissions, analysis records, pattern definitions, submission/pattern
    links and similarity edges live in plain dicts guarded by one lock.
    Analysis records are unique per submission id, pattern definitions per
    label and edges per unordered user pair, so repeated deliveries of the
    same work item never create duplicates.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._submissions: dict[str, Submission] = {}
        self._analyses: dict[str, AnalysisRecord] = {}
        self._patterns: dict[str, str] = {}
        self._links: dict[str, list[str]] = {}
        self._edges: dict[tuple[str, str], StoredEdge] = {}

    # submissions

    def add_submission(self, user_id: str, source_code: str, language: str = "", submission_id: str | None = None) -> str:
        sid = submission_id or str(uuid.uuid4())
        with self._lock:
            self._submissions[sid] = Submission(id=sid, user_id=user_id, source_code=source_code, language=language)
        return sid

    def fetch(self, submission_id: str) -> Submission:
        with self._lock:
            submission = self._submissions.get(submission_id)
        if submission is None:
            raise NotFoundError(f"submission {submission_id} not found")
        return submission

    # result sink

    def store_analysis(self, record: AnalysisRecord) -> bool:
        with self._lock:
            created = record.submission_id not in self._analyses
            self._analyses[record.submission_id] = record
            # Links belong to the latest analysis; the caller relinks its patterns.
            self._links.pop(record.submission_id, None)
        return created

    def ensure_pattern(self, name: str) -> str:
        with self._lock:
            pattern_id = self._patterns.get(name)
            if pattern_id is None:
                pattern_id = str(uuid.uuid4())
                self._patterns[name] = pattern_id
        return pattern_id

    def link_pattern(self, submission_id: str, pattern_id: str) -> bool:
        with self._lock:
            linked = self._links.setdefault(submission_id, [])
            if pattern_id in linked:
                return False
            linked.append(pattern_id)
        return True

    def get_analysis(self, submission_id: str) -> AnalysisRecord:
        with self._lock:
            record = self._analyses.get(submission_id)
        if record is None:
            raise NotFoundError(f"analysis for submission {submission_id} not found")
        return record

    def patterns_for_submission(self, submission_id: str) -> list[str]:
        with self._lock:
            names_by_id = {pid: name for name, pid in self._patterns.items()}
            return [names_by_id[pid] for pid in self._links.get(submission_id, [])]

    # fact source

    def iter_pattern_facts(self) -> Iterator[PatternFact]:
        with self._lock:
            names_by_id = {pid: name for name, pid in self._patterns.items()}
            facts = [
                PatternFact(user_id=self._submissions[sid].user_id, pattern=names_by_id[pid])
                for sid, pattern_ids in self._links.items()
                if sid in self._submissions
                for pid in pattern_ids
            ]
        return iter(facts)

    def patterns_for_user(self, user_id: str) -> list[str]:
        seen: set[str] = set()
        result: list[str] = []
        for fact in self.iter_pattern_facts():
            if fact.user_id == user_id and fact.pattern not in seen:
                seen.add(fact.pattern)
                result.append(fact.pattern)
        return result

    # edge store

    def upsert_edge(self, user_a: str, user_b: str, similarity: float) -> bool:
        key = pair_key(user_a, user_b)
        with self._lock:
            existing = self._edges.get(key)
            if existing is not None:
                self._edges[key] = StoredEdge(
                    id=existing.id,
                    user_a=existing.user_a,
                    user_b=existing.user_b,
                    similarity=similarity,
                    created_at=existing.created_at,
                )
                return False
            self._edges[key] = StoredEdge(
                id=str(uuid.uuid4()),
                user_a=user_a,
                user_b=user_b,
                similarity=similarity,
                created_at=utcnow(),
            )
        return True

    def delete_edges_except(self, keep: set[tuple[str, str]]) -> int:
        with self._lock:
            stale = [key for key in self._edges if key not in keep]
            for key in stale:
                del self._edges[key]
        return len(stale)

    def edges_for_user(self, user_id: str, limit: int) -> list[StoredEdge]:
        with self._lock:
            touching = [e for e in self._edges.values() if user_id in (e.user_a, e.user_b)]
        touching.sort(key=lambda e: (-e.similarity, e.other(user_id)))
        return touching[:limit] if limit > 0 else []

    def all_edges(self) -> list[StoredEdge]:
        with self._lock:
            return sorted(self._edges.values(), key=lambda e: pair_key(e.user_a, e.user_b))
