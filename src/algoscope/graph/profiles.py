from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..pipeline.ports import PatternFact


@dataclass
class UserProfile:
    user_id: str
    patterns: dict[str, int] = field(default_factory=dict)

    @property
    def labels(self) -> frozenset[str]:
        return frozenset(self.patterns)

    @property
    def total(self) -> int:
        return sum(self.patterns.values())


def build_user_profiles(facts: Iterable[PatternFact]) -> list[UserProfile]:
    """Group (user, pattern) facts into one occurrence-count profile per user.

    Always a full recomputation over the facts given; nothing is cached
    between calls. Profiles come back sorted by user id.
    """
    counts: dict[str, Counter[str]] = defaultdict(Counter)
    n_facts = 0
    for fact in facts:
        counts[fact.user_id][fact.pattern] += 1
        n_facts += 1

    logging.debug(f"Aggregated {n_facts} pattern facts into {len(counts)} profiles")
    return [UserProfile(user_id=uid, patterns=dict(counts[uid])) for uid in sorted(counts)]
