from __future__ import annotations

from .persist import IncompleteRebuildError, PersistStats, persist_graph
from .profiles import UserProfile, build_user_profiles
from .query import Recommendation, find_shared_patterns, get_recommendations
from .rebuild import GraphRebuilder, RebuildInProgressError, RebuildReport
from .similarity import (
    RebuildError,
    RebuildTimeoutError,
    SimilarityEdge,
    build_similarity_graph,
    weighted_jaccard,
)

__all__ = [
    "GraphRebuilder",
    "IncompleteRebuildError",
    "PersistStats",
    "RebuildError",
    "RebuildInProgressError",
    "RebuildReport",
    "RebuildTimeoutError",
    "Recommendation",
    "SimilarityEdge",
    "UserProfile",
    "build_similarity_graph",
    "build_user_profiles",
    "find_shared_patterns",
    "get_recommendations",
    "persist_graph",
    "weighted_jaccard",
]
