from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .labels import Complexity, PatternLabel
from .types import FeatureRecord

FeaturePredicate = Callable[[FeatureRecord], bool]


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: FeaturePredicate
    label: str


def _always(_f: FeatureRecord) -> bool:
    return True


# Time complexity: worst case first, so co-occurring patterns report the
# dominating class. The last rule is unconditional.
TIME_RULES: tuple[Rule, ...] = (
    Rule("dp_table", lambda f: f.has_dp_table and f.max_loop_depth >= 2, Complexity.QUADRATIC),
    Rule("divide_conquer_with_sort", lambda f: f.has_divide_conquer and f.has_sorting, Complexity.LOG_LINEAR),
    Rule("divide_conquer", lambda f: f.has_divide_conquer, Complexity.LOG_LINEAR),
    Rule("binary_search_in_loop", lambda f: f.has_binary_search and f.max_loop_depth >= 1, Complexity.LOG_LINEAR),
    Rule(
        "bare_recursion",
        lambda f: f.has_recursion and not f.has_dp_memo and not f.has_binary_search and not f.has_divide_conquer,
        Complexity.EXPONENTIAL,
    ),
    Rule("binary_search", lambda f: f.has_binary_search, Complexity.LOGARITHMIC),
    # Memoized state size is unknown; quadratic over-estimates on purpose.
    Rule("memoized_recursion", lambda f: f.has_dp_memo, Complexity.QUADRATIC),
    Rule("nested_loops", lambda f: f.max_loop_depth >= 2, Complexity.QUADRATIC),
    Rule("loop_with_sort", lambda f: f.max_loop_depth == 1 and f.has_sorting, Complexity.LOG_LINEAR),
    Rule("single_loop_or_traversal", lambda f: f.max_loop_depth == 1 or f.has_dfs_bfs, Complexity.LINEAR),
    Rule("constant", _always, Complexity.CONSTANT),
)

SPACE_RULES: tuple[Rule, ...] = (
    Rule("array_2d", lambda f: f.uses_2d_array, Complexity.QUADRATIC),
    Rule("dp_with_map", lambda f: (f.has_dp_memo or f.has_dp_table) and f.uses_map, Complexity.LINEAR),
    Rule("balanced_recursion", lambda f: f.has_recursion and f.has_divide_conquer, Complexity.LOGARITHMIC),
    Rule("recursion_stack", lambda f: f.has_recursion, Complexity.LINEAR),
    Rule(
        "linear_structures",
        lambda f: f.uses_map or f.uses_vector or f.uses_stack or f.uses_queue,
        Complexity.LINEAR,
    ),
    Rule("constant", _always, Complexity.CONSTANT),
)

# Loop labels are mutually exclusive; the rest are independent. Output keeps
# this order.
PATTERN_RULES: tuple[Rule, ...] = (
    Rule("nested_loop", lambda f: f.max_loop_depth >= 2, PatternLabel.NESTED_LOOP),
    Rule(
        "sequential_loops",
        lambda f: f.max_loop_depth == 1 and f.num_loop_blocks >= 2,
        PatternLabel.SEQUENTIAL_LOOPS,
    ),
    Rule("loop", lambda f: f.max_loop_depth == 1 and f.num_loop_blocks == 1, PatternLabel.LOOP),
    Rule("recursion", lambda f: f.has_recursion, PatternLabel.RECURSION),
    Rule("binary_search", lambda f: f.has_binary_search, PatternLabel.BINARY_SEARCH),
    Rule("sorting", lambda f: f.has_sorting, PatternLabel.SORTING),
    Rule("hashing", lambda f: f.has_hashing, PatternLabel.HASHING),
    Rule("dfs_bfs", lambda f: f.has_dfs_bfs, PatternLabel.DFS_BFS),
    Rule("divide_conquer", lambda f: f.has_divide_conquer, PatternLabel.DIVIDE_AND_CONQUER),
    Rule("dp_memo", lambda f: f.has_dp_memo, PatternLabel.DP_MEMOIZATION),
    Rule("dp_table", lambda f: f.has_dp_table, PatternLabel.DP_TABULATION),
    Rule("early_break", lambda f: f.has_early_break, PatternLabel.EARLY_BREAK),
)


def first_match(rules: tuple[Rule, ...], features: FeatureRecord) -> Rule:
    for rule in rules:
        if rule.predicate(features):
            return rule
    raise ValueError("Rule chain has no matching rule; the last rule must be unconditional")


def classify_time(features: FeatureRecord) -> str:
    return first_match(TIME_RULES, features).label


def classify_space(features: FeatureRecord) -> str:
    return first_match(SPACE_RULES, features).label


def build_pattern_list(features: FeatureRecord) -> tuple[str, ...]:
    return tuple(rule.label for rule in PATTERN_RULES if rule.predicate(features))
