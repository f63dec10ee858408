"""Static, heuristic detection of algorithmic techniques and Big-O classes.

Source text is never parsed or executed. It is stripped of comments and
literals, scanned once for loop nesting and function names, run through an
ordered catalog of textual matchers, and finally classified by two ordered
rule chains (time and space). Results are best-effort and language-agnostic.
"""

from __future__ import annotations

from .classify import build_pattern_list, classify_space, classify_time
from .labels import Complexity, PatternLabel
from .matchers import MATCHERS, Matcher, build_feature_record
from .scanner import scan
from .stripper import strip_comments_and_strings
from .types import AnalysisResult, FeatureRecord

__all__ = [
    "MATCHERS",
    "AnalysisResult",
    "Complexity",
    "FeatureRecord",
    "Matcher",
    "PatternLabel",
    "analyze",
    "analyze_code",
    "detect_patterns",
    "infer_complexity",
    "strip_comments_and_strings",
]


def analyze_code(code: str, catalog: tuple[Matcher, ...] = MATCHERS) -> FeatureRecord:
    clean = strip_comments_and_strings(code)
    return build_feature_record(scan(clean), catalog)


def analyze(code: str) -> AnalysisResult:
    features = analyze_code(code)
    return AnalysisResult(
        patterns=build_pattern_list(features),
        time_complexity=classify_time(features),
        space_complexity=classify_space(features),
    )


def detect_patterns(code: str) -> list[str]:
    return list(build_pattern_list(analyze_code(code)))


def infer_complexity(code: str) -> tuple[str, str]:
    features = analyze_code(code)
    return classify_time(features), classify_space(features)
