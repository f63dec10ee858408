from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from ..config import GraphConfig
from ..pipeline.ports import CollaboratorError, EdgeStore, FactSource
from .persist import persist_graph
from .profiles import build_user_profiles
from .similarity import RebuildError, SimilarityEdge, build_similarity_graph


class RebuildInProgressError(RebuildError):
    pass


@dataclass(frozen=True)
class RebuildReport:
    profiles: int
    edges: tuple[SimilarityEdge, ...]
    created: int
    updated: int
    removed: int
    duration: float


class GraphRebuilder:
    """Full recomputation of the user similarity graph.

    Facts -> profiles -> pairwise weighted Jaccard -> idempotent persist.
    Only one rebuild runs at a time per rebuilder; a second concurrent call
    fails fast with ``RebuildInProgressError``. Any failure aborts the run
    with a ``RebuildError``; edges written before the failure stay in place.
    """

    def __init__(self, facts: FactSource, store: EdgeStore, config: GraphConfig | None = None) -> None:
        self.facts = facts
        self.store = store
        self.config = config or GraphConfig()
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def rebuild(self, threshold: float | None = None, timeout: float | None = None) -> RebuildReport:
        if not self._lock.acquire(blocking=False):
            raise RebuildInProgressError("a similarity graph rebuild is already running")
        try:
            return self._rebuild(
                self.config.similarity_threshold if threshold is None else threshold,
                self.config.rebuild_timeout if timeout is None else timeout,
            )
        finally:
            self._lock.release()

    def _rebuild(self, threshold: float, timeout: float | None) -> RebuildReport:
        started = time.monotonic()
        deadline = started + timeout if timeout is not None else None
        logging.info("Building similarity graph...")

        try:
            profiles = build_user_profiles(self.facts.iter_pattern_facts())
        except CollaboratorError as e:
            logging.error(f"failed to build profiles: {e}")
            raise RebuildError(f"could not load pattern facts: {e}") from e
        logging.info(f"Built {len(profiles)} user profiles")

        if len(profiles) < 2:
            logging.info("Need at least 2 users to build graph")

        edges = build_similarity_graph(profiles, threshold, deadline)
        logging.info(f"Found {len(edges)} similarity edges")

        try:
            stats = persist_graph(self.store, edges)
        except RebuildError as e:
            logging.error(f"failed to persist graph: {e}")
            raise

        duration = time.monotonic() - started
        logging.info(
            f"Similarity graph built in {duration:.2f}s: "
            f"{stats.created} created, {stats.updated} updated, {stats.removed} removed"
        )
        return RebuildReport(
            profiles=len(profiles),
            edges=tuple(edges),
            created=stats.created,
            updated=stats.updated,
            removed=stats.removed,
            duration=duration,
        )
