from __future__ import annotations

import logging
from dataclasses import dataclass

from ..pipeline.ports import EdgeStore, StorageUnavailableError
from .similarity import RebuildError, SimilarityEdge


class IncompleteRebuildError(RebuildError):
    def __init__(self, message: str, persisted: int) -> None:
        super().__init__(message)
        self.persisted = persisted


@dataclass
class PersistStats:
    created: int = 0
    updated: int = 0
    removed: int = 0

    @property
    def persisted(self) -> int:
        return self.created + self.updated


def persist_graph(store: EdgeStore, edges: list[SimilarityEdge], prune: bool = True) -> PersistStats:
    """Write edges keyed by unordered user pair.

    A pair that already has a stored edge keeps its record and only gets the
    new score, so running this twice on the same edges stores nothing new.
    With ``prune`` the edges of pairs absent from ``edges`` are removed.
    """
    stats = PersistStats()
    keep: set[tuple[str, str]] = set()

    for edge in edges:
        if edge.key in keep:
            continue
        try:
            created = store.upsert_edge(edge.user_a, edge.user_b, edge.similarity)
        except StorageUnavailableError as e:
            raise IncompleteRebuildError(
                f"persisting edge {edge.user_a} <-> {edge.user_b} failed: {e}", stats.persisted
            ) from e
        keep.add(edge.key)
        if created:
            stats.created += 1
        else:
            stats.updated += 1

    if prune:
        try:
            stats.removed = store.delete_edges_except(keep)
        except StorageUnavailableError as e:
            raise IncompleteRebuildError(f"removing stale edges failed: {e}", stats.persisted) from e

    logging.debug(f"Persisted graph: {stats.created} created, {stats.updated} updated, {stats.removed} removed")
    return stats
