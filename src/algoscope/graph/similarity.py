from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from itertools import combinations

from ..pipeline.ports import pair_key
from .profiles import UserProfile


class RebuildError(Exception):
    pass


class RebuildTimeoutError(RebuildError):
    pass


@dataclass(frozen=True)
class SimilarityEdge:
    user_a: str
    user_b: str
    similarity: float

    @property
    def key(self) -> tuple[str, str]:
        return pair_key(self.user_a, self.user_b)


def weighted_jaccard(a: Mapping[str, int], b: Mapping[str, int]) -> float:
    """Sum of per-label minimum counts over sum of per-label maximum counts.

    Labels present on one side only contribute their full count to the
    union. Two empty profiles have similarity 0.
    """
    intersection = 0
    union = 0
    for label in a.keys() | b.keys():
        count_a = a.get(label, 0)
        count_b = b.get(label, 0)
        intersection += min(count_a, count_b)
        union += max(count_a, count_b)
    if union == 0:
        return 0.0
    return intersection / union


def build_similarity_graph(
    profiles: list[UserProfile],
    threshold: float,
    deadline: float | None = None,
) -> list[SimilarityEdge]:
    """Score every unordered pair of profiles and keep those at or above threshold.

    Quadratic in the number of profiles; meant for offline rebuilds only.
    ``deadline`` is a ``time.monotonic()`` value after which the scan stops
    with ``RebuildTimeoutError``.
    """
    edges: list[SimilarityEdge] = []
    last_left: str | None = None

    for left, right in combinations(profiles, 2):
        if deadline is not None and left.user_id != last_left:
            last_left = left.user_id
            if time.monotonic() > deadline:
                raise RebuildTimeoutError(f"similarity scan exceeded its deadline after {len(edges)} edges")
        score = weighted_jaccard(left.patterns, right.patterns)
        if score >= threshold:
            edges.append(SimilarityEdge(user_a=left.user_id, user_b=right.user_id, similarity=score))

    return edges
