from __future__ import annotations

from dataclasses import dataclass

from ..pipeline.ports import EdgeStore, FactSource


@dataclass(frozen=True)
class Recommendation:
    id: str
    user_a: str
    user_b: str
    similarity: float
    created_at: str
    shared_patterns: tuple[str, ...]
    user_a_patterns: tuple[str, ...]
    user_b_patterns: tuple[str, ...]

    @property
    def total_patterns(self) -> int:
        return len(self.shared_patterns)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_a": self.user_a,
            "user_b": self.user_b,
            "similarity": self.similarity,
            "created_at": self.created_at,
            "shared_patterns": list(self.shared_patterns),
            "total_patterns": self.total_patterns,
            "user_a_patterns": list(self.user_a_patterns),
            "user_b_patterns": list(self.user_b_patterns),
        }


def find_shared_patterns(a: list[str], b: list[str]) -> list[str]:
    in_a = set(a)
    return [p for p in b if p in in_a]


def get_recommendations(store: EdgeStore, facts: FactSource, user_id: str, limit: int = 5) -> list[Recommendation]:
    """Top ``limit`` edges touching ``user_id`` by descending similarity.

    Shared patterns compare label sets only; occurrence counts are ignored.
    """
    cache: dict[str, list[str]] = {}

    def patterns_of(uid: str) -> list[str]:
        if uid not in cache:
            cache[uid] = facts.patterns_for_user(uid)
        return cache[uid]

    recommendations: list[Recommendation] = []
    for edge in store.edges_for_user(user_id, limit):
        a_patterns = patterns_of(edge.user_a)
        b_patterns = patterns_of(edge.user_b)
        recommendations.append(
            Recommendation(
                id=edge.id,
                user_a=edge.user_a,
                user_b=edge.user_b,
                similarity=edge.similarity,
                created_at=edge.created_at.strftime("%Y-%m-%d"),
                shared_patterns=tuple(find_shared_patterns(a_patterns, b_patterns)),
                user_a_patterns=tuple(a_patterns),
                user_b_patterns=tuple(b_patterns),
            )
        )
    return recommendations
