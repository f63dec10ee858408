from __future__ import annotations

from pathlib import Path
from typing import Any

from .analysis import AnalysisResult, FeatureRecord, analyze, analyze_code, detect_patterns, infer_complexity
from .config import ConfigError, Settings, load_settings
from .graph import (
    GraphRebuilder,
    IncompleteRebuildError,
    RebuildError,
    RebuildInProgressError,
    RebuildTimeoutError,
    get_recommendations,
    weighted_jaccard,
)
from .ignore import get_ignore_specs
from .pipeline import (
    CollaboratorError,
    InMemoryStore,
    NotFoundError,
    QueueUnavailableError,
    StorageUnavailableError,
    WorkerPool,
    WorkQueue,
)
from .report import build_report
from .sources import CollectContext, collect_sources
from .version import __version__
from .writer import report_to_string

__all__ = [
    "AnalysisResult",
    "CollaboratorError",
    "ConfigError",
    "FeatureRecord",
    "GraphRebuilder",
    "InMemoryStore",
    "IncompleteRebuildError",
    "NotFoundError",
    "QueueUnavailableError",
    "RebuildError",
    "RebuildInProgressError",
    "RebuildTimeoutError",
    "Settings",
    "StorageUnavailableError",
    "WorkQueue",
    "WorkerPool",
    "__version__",
    "analyze",
    "analyze_code",
    "analyze_path",
    "detect_patterns",
    "get_recommendations",
    "infer_complexity",
    "load_settings",
    "to_json",
    "to_markdown",
    "to_text",
    "to_yaml",
    "weighted_jaccard",
]


def analyze_path(
    path: str | Path,
    *,
    by_author: bool = False,
    max_file_bytes: int | None = None,
    ignore_file: str | Path | None = None,
    no_default_ignores: bool = False,
    settings: Settings | None = None,
    threshold: float | None = None,
    top: int | None = None,
) -> dict[str, Any]:
    root = Path(path).resolve()
    if not root.exists():
        raise ValueError(f"'{path}' does not exist")

    base_dir = root if root.is_dir() else root.parent
    ignore_path = Path(ignore_file).resolve() if ignore_file else None
    ctx = CollectContext(
        base_dir=base_dir,
        combined_spec=get_ignore_specs(base_dir, ignore_path, no_default_ignores, None),
        max_file_bytes=max_file_bytes,
        by_author=by_author,
    )
    collection = collect_sources(root, ctx)
    return build_report(root, collection, settings or load_settings(), by_author, threshold, top)


def to_yaml(report: dict[str, Any]) -> str:
    return report_to_string(report, "yaml")


def to_json(report: dict[str, Any]) -> str:
    return report_to_string(report, "json")


def to_text(report: dict[str, Any]) -> str:
    return report_to_string(report, "txt")


def to_markdown(report: dict[str, Any]) -> str:
    return report_to_string(report, "md")
