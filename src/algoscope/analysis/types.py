from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScanResult:
    clean: str
    max_loop_depth: int
    num_loop_blocks: int
    function_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class FeatureRecord:
    """Structural summary of one source text.

    Built once from a single input and never modified afterwards; the
    pattern rules and both complexity trees read from the same record.
    """

    max_loop_depth: int = 0
    num_loop_blocks: int = 0

    has_recursion: bool = False
    has_binary_search: bool = False
    has_divide_conquer: bool = False
    has_dp_memo: bool = False
    has_dp_table: bool = False
    has_dfs_bfs: bool = False
    has_sorting: bool = False
    has_hashing: bool = False
    has_early_break: bool = False

    uses_vector: bool = False
    uses_map: bool = False
    uses_2d_array: bool = False
    uses_stack: bool = False
    uses_queue: bool = False

    function_names: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AnalysisResult:
    patterns: tuple[str, ...]
    time_complexity: str
    space_complexity: str

    def to_dict(self) -> dict[str, object]:
        return {
            "time_complexity": self.time_complexity,
            "space_complexity": self.space_complexity,
            "patterns": list(self.patterns),
        }
