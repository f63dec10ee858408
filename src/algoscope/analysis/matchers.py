from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .patterns import (
    ALGORITHM_PATTERNS,
    BINARY_SEARCH_MID_RE,
    BINARY_SEARCH_MOVE_RE,
    DATA_STRUCTURE_PATTERNS,
    DP_TABLE_ACCESS_RE,
    GRAPH_VOCABULARY_RE,
    HALVING_RE,
    VISITED_RE,
    matches_any,
    self_call_re,
)
from .types import FeatureRecord, ScanResult

Signals = Mapping[str, bool]
Predicate = Callable[[ScanResult, Signals], bool]


@dataclass(frozen=True)
class Matcher:
    name: str
    predicate: Predicate


def _uses(kind: str) -> Predicate:
    patterns = DATA_STRUCTURE_PATTERNS[kind]
    return lambda scan, _signals: matches_any(scan.clean, patterns)


def _has(kind: str) -> Predicate:
    patterns = ALGORITHM_PATTERNS[kind]
    return lambda scan, _signals: matches_any(scan.clean, patterns)


def _has_hashing(scan: ScanResult, signals: Signals) -> bool:
    return signals["uses_map"] or matches_any(scan.clean, ALGORITHM_PATTERNS["hash_set"])


def _has_binary_search(scan: ScanResult, _signals: Signals) -> bool:
    # Both landmarks are required: a midpoint over lo/hi-style names and a
    # range-halving reassignment.
    return bool(BINARY_SEARCH_MID_RE.search(scan.clean)) and bool(BINARY_SEARCH_MOVE_RE.search(scan.clean))


def _has_recursion(scan: ScanResult, _signals: Signals) -> bool:
    # Declaration plus at least one self call: "name(" seen twice or more.
    for name in scan.function_names:
        occurrences = self_call_re(name).findall(scan.clean)
        if len(occurrences) >= 2:
            return True
    return False


def _has_divide_conquer(scan: ScanResult, signals: Signals) -> bool:
    return signals["has_recursion"] and bool(HALVING_RE.search(scan.clean))


def _has_dfs_bfs(scan: ScanResult, signals: Signals) -> bool:
    if not VISITED_RE.search(scan.clean) or not GRAPH_VOCABULARY_RE.search(scan.clean):
        return False
    return signals["has_recursion"] or signals["uses_stack"] or signals["uses_queue"]


def _has_dp_memo(_scan: ScanResult, signals: Signals) -> bool:
    return signals["has_recursion"] and signals["uses_map"]


def _has_dp_table(scan: ScanResult, _signals: Signals) -> bool:
    return scan.max_loop_depth >= 2 and bool(DP_TABLE_ACCESS_RE.search(scan.clean))


# Evaluation order is part of the contract: a matcher may only read signals
# produced by entries above it.
MATCHERS: tuple[Matcher, ...] = (
    Matcher("uses_vector", _uses("vector")),
    Matcher("uses_map", _uses("map")),
    Matcher("uses_2d_array", _uses("array_2d")),
    Matcher("uses_stack", _uses("stack")),
    Matcher("uses_queue", _uses("queue")),
    Matcher("has_sorting", _has("sort")),
    Matcher("has_hashing", _has_hashing),
    Matcher("has_binary_search", _has_binary_search),
    Matcher("has_recursion", _has_recursion),
    Matcher("has_divide_conquer", _has_divide_conquer),
    Matcher("has_dfs_bfs", _has_dfs_bfs),
    Matcher("has_dp_memo", _has_dp_memo),
    Matcher("has_dp_table", _has_dp_table),
    Matcher("has_early_break", _has("early_exit")),
)


def evaluate_matchers(scan: ScanResult, catalog: tuple[Matcher, ...] = MATCHERS) -> dict[str, bool]:
    signals: dict[str, bool] = {}
    view = MappingProxyType(signals)
    for matcher in catalog:
        if matcher.name in signals:
            raise ValueError(f"Duplicate matcher name in catalog: {matcher.name}")
        try:
            signals[matcher.name] = bool(matcher.predicate(scan, view))
        except KeyError as e:
            raise ValueError(f"Matcher {matcher.name!r} depends on {e} which is not evaluated before it") from e
    return signals


def build_feature_record(scan: ScanResult, catalog: tuple[Matcher, ...] = MATCHERS) -> FeatureRecord:
    signals = evaluate_matchers(scan, catalog)
    return FeatureRecord(
        max_loop_depth=scan.max_loop_depth,
        num_loop_blocks=scan.num_loop_blocks,
        function_names=scan.function_names,
        **signals,
    )
