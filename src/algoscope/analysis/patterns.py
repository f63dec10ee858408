from __future__ import annotations

import re


def _compile_all(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p) for p in patterns)


def matches_any(text: str, patterns: tuple[re.Pattern[str], ...]) -> bool:
    return any(p.search(text) for p in patterns)


# Data structures: C++, Java, Go and Python spellings
DATA_STRUCTURE_PATTERNS = {
    "vector": _compile_all(r"\bvector\s*<", r"\[\]", r"ArrayList\b", r"\[\s*\]"),
    "map": _compile_all(r"\bunordered_map\s*<", r"\bmap\s*<", r"\bHashMap\b", r"\bdict\b", r"\bmap\["),
    "array_2d": _compile_all(r"\[\s*\w+\s*\]\s*\[", r"vector\s*<\s*vector", r"\[\]\[\]"),
    "stack": _compile_all(r"\bstack\s*<", r"\bStack\b"),
    "queue": _compile_all(r"\bqueue\s*<", r"\bdeque\s*<", r"\bQueue\b", r"ArrayDeque\b"),
}

ALGORITHM_PATTERNS = {
    "sort": _compile_all(r"\bsort\s*\(", r"\.sort\s*\(", r"Collections\.sort\b", r"Arrays\.sort\b"),
    "hash_set": _compile_all(r"\bunordered_set\s*<", r"\bset\s*<", r"\bHashSet\b"),
    "early_exit": _compile_all(r"\bbreak\b", r"\breturn\b"),
}

# Declarations are matched within a single line.
FUNCTION_DECL_RE = re.compile(r"(?m)(?:^|\n)[^\S\n]*(?:[\w:*&<>\[\]]+[^\S\n]+)+(\w+)[^\S\n]*\(")

BINARY_SEARCH_MID_RE = re.compile(r"\bmid\s*=\s*[^;\n]*(?:lo|hi|low|high|left|right|l|r)\b")
BINARY_SEARCH_MOVE_RE = re.compile(
    r"(?:lo|low|left|l)\s*=\s*mid\s*[+\-]\s*1|(?:hi|high|right|r)\s*=\s*mid\s*[+\-]\s*1"
)

HALVING_RE = re.compile(r"(?:n|size|len|length|count|mid|hi|high|right)\s*/\s*2")

VISITED_RE = re.compile(r"\bvisited\b")
GRAPH_VOCABULARY_RE = re.compile(r"\b(?:adj|graph|neighbors|neighbours|edges|children|nodes)\b")

DP_TABLE_ACCESS_RE = re.compile(r"\bdp\s*\[")

INDENT_LOOP_HEADER_RE = re.compile(r"^(\s*)(?:for|while)\b[^\n]*:\s*$")


def self_call_re(name: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(name) + r"\s*\(")
