from __future__ import annotations

from typing import ClassVar


class PatternLabel:
    """Stable pattern names. Stored rows key on these strings; never rename."""

    NESTED_LOOP = "Nested Loop"
    SEQUENTIAL_LOOPS = "Sequential Loops"
    LOOP = "Loop"
    RECURSION = "Recursion"
    BINARY_SEARCH = "Binary Search"
    SORTING = "Sorting"
    HASHING = "Hashing"
    DFS_BFS = "DFS/BFS"
    DIVIDE_AND_CONQUER = "Divide and Conquer"
    DP_MEMOIZATION = "Dynamic Programming (Memoization)"
    DP_TABULATION = "Dynamic Programming (Tabulation)"
    EARLY_BREAK = "Early Break Optimization"

    ALL: ClassVar[tuple[str, ...]] = (
        NESTED_LOOP,
        SEQUENTIAL_LOOPS,
        LOOP,
        RECURSION,
        BINARY_SEARCH,
        SORTING,
        HASHING,
        DFS_BFS,
        DIVIDE_AND_CONQUER,
        DP_MEMOIZATION,
        DP_TABULATION,
        EARLY_BREAK,
    )


class Complexity:
    CONSTANT = "O(1)"
    LOGARITHMIC = "O(log n)"
    LINEAR = "O(n)"
    LOG_LINEAR = "O(n log n)"
    QUADRATIC = "O(n^2)"
    EXPONENTIAL = "O(2^n)"

    SCALE: ClassVar[tuple[str, ...]] = (CONSTANT, LOGARITHMIC, LINEAR, LOG_LINEAR, QUADRATIC, EXPONENTIAL)

    @classmethod
    def rank(cls, label: str) -> int:
        try:
            return cls.SCALE.index(label)
        except ValueError:
            raise ValueError(f"Unknown complexity label: {label!r}") from None
