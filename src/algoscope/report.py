from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .analysis import analyze
from .config import DEFAULT_SETTINGS, Settings
from .graph import GraphRebuilder, build_user_profiles, get_recommendations
from .pipeline import InMemoryStore, NotFoundError, WorkerPool, WorkQueue
from .sources import SourceCollection, SourceFile


def _file_entry(source: SourceFile, time_complexity: str, space_complexity: str, patterns: list[str]) -> dict[str, Any]:
    entry: dict[str, Any] = {"path": source.path, "language": source.language}
    if source.author is not None:
        entry["author"] = source.author
    entry["time_complexity"] = time_complexity
    entry["space_complexity"] = space_complexity
    entry["patterns"] = patterns
    return entry


def _analyze_directly(source: SourceFile) -> dict[str, Any]:
    result = analyze(source.content)
    return _file_entry(source, result.time_complexity, result.space_complexity, list(result.patterns))


def _run_pool(store: InMemoryStore, sources: list[SourceFile], settings: Settings) -> None:
    work_queue = WorkQueue(settings.analysis.queue_size)
    pool = WorkerPool(work_queue, store, store, settings.analysis)
    pool.start()
    try:
        for source in sources:
            store.add_submission(source.author or "", source.content, source.language, submission_id=source.path)
            work_queue.put(source.path)
        pool.wait_idle()
    finally:
        pool.stop()
    logging.info(
        f"Worker pool finished: {pool.stats.processed} processed, "
        f"{pool.stats.failed} failed, {pool.stats.retried} retried"
    )


def _author_section(store: InMemoryStore, settings: Settings, threshold: float | None, top: int | None) -> list[dict[str, Any]]:
    GraphRebuilder(store, store, settings.graph).rebuild(threshold=threshold)
    limit = top if top is not None else settings.graph.recommendation_limit

    authors: list[dict[str, Any]] = []
    for profile in build_user_profiles(store.iter_pattern_facts()):
        recommendations = [
            {
                "author": rec.user_b if rec.user_a == profile.user_id else rec.user_a,
                "similarity": round(rec.similarity, 4),
                "shared_patterns": list(rec.shared_patterns),
            }
            for rec in get_recommendations(store, store, profile.user_id, limit)
        ]
        authors.append(
            {
                "author": profile.user_id,
                "patterns": dict(sorted(profile.patterns.items())),
                "recommendations": recommendations,
            }
        )
    return authors


def build_report(
    root: Path,
    collection: SourceCollection,
    settings: Settings = DEFAULT_SETTINGS,
    by_author: bool = False,
    threshold: float | None = None,
    top: int | None = None,
) -> dict[str, Any]:
    """Assemble the report for an analyzed tree.

    Without ``by_author`` every file is analyzed in-process. With it, files
    that belong to an author go through the worker pool into an in-memory
    store, the similarity graph is rebuilt from the stored pattern facts and
    each author gets their nearest neighbours.
    """
    report: dict[str, Any] = {"name": root.name, "type": "analysis"}
    skipped = [{"path": path, "reason": reason} for path, reason in collection.skipped]

    if not by_author:
        report["files"] = [_analyze_directly(source) for source in collection.files]
        report["skipped"] = skipped
        return report

    authored = [source for source in collection.files if source.author is not None]
    store = InMemoryStore()
    _run_pool(store, authored, settings)

    files: list[dict[str, Any]] = []
    for source in collection.files:
        if source.author is None:
            files.append(_analyze_directly(source))
            continue
        try:
            record = store.get_analysis(source.path)
        except NotFoundError:
            skipped.append({"path": source.path, "reason": "analysis failed"})
            continue
        files.append(_file_entry(source, record.time_complexity, record.space_complexity, list(record.patterns)))

    report["files"] = files
    report["skipped"] = skipped
    report["authors"] = _author_section(store, settings, threshold, top)
    return report
