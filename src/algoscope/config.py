from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AnalysisConfig:
    workers: int = 4
    max_retries: int = 2
    retry_delay: float = 0.1
    queue_size: int = 0  # 0 = unbounded


@dataclass(frozen=True)
class GraphConfig:
    similarity_threshold: float = 0.1
    recommendation_limit: int = 5
    rebuild_timeout: float | None = 300.0


@dataclass(frozen=True)
class Settings:
    analysis: AnalysisConfig = AnalysisConfig()
    graph: GraphConfig = GraphConfig()


ANALYSIS = AnalysisConfig()
GRAPH = GraphConfig()
DEFAULT_SETTINGS = Settings()


def _require_int(section: str, cfg: Any, *names: str) -> None:
    for name in names:
        value = getattr(cfg, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{section}.{name} must be of type int, got {type(value).__name__}")


def _require_number(section: str, cfg: Any, *names: str, optional: bool = False) -> None:
    for name in names:
        value = getattr(cfg, name)
        if value is None and optional:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{section}.{name} must be of type float, got {type(value).__name__}")


def _validate_analysis(cfg: AnalysisConfig) -> None:
    _require_int("analysis", cfg, "workers", "max_retries", "queue_size")
    _require_number("analysis", cfg, "retry_delay")
    if cfg.workers < 1:
        raise ConfigError(f"analysis.workers must be at least 1, got {cfg.workers}")
    if cfg.max_retries < 0:
        raise ConfigError(f"analysis.max_retries must be non-negative, got {cfg.max_retries}")
    if cfg.retry_delay < 0:
        raise ConfigError(f"analysis.retry_delay must be non-negative, got {cfg.retry_delay}")
    if cfg.queue_size < 0:
        raise ConfigError(f"analysis.queue_size must be non-negative, got {cfg.queue_size}")


def _validate_graph(cfg: GraphConfig) -> None:
    _require_int("graph", cfg, "recommendation_limit")
    _require_number("graph", cfg, "similarity_threshold")
    _require_number("graph", cfg, "rebuild_timeout", optional=True)
    if not 0.0 <= cfg.similarity_threshold <= 1.0:
        raise ConfigError(f"graph.similarity_threshold must be within [0, 1], got {cfg.similarity_threshold}")
    if cfg.recommendation_limit < 1:
        raise ConfigError(f"graph.recommendation_limit must be at least 1, got {cfg.recommendation_limit}")
    if cfg.rebuild_timeout is not None and cfg.rebuild_timeout <= 0:
        raise ConfigError(f"graph.rebuild_timeout must be positive or null, got {cfg.rebuild_timeout}")


def validate_settings(settings: Settings) -> Settings:
    _validate_analysis(settings.analysis)
    _validate_graph(settings.graph)
    return settings


def _section(cls: type, base: Any, section: str, data: Any) -> Any:
    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigError(f"'{section}' section must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown key(s) in '{section}' section: {', '.join(unknown)}")
    return replace(base, **data)


def settings_from_dict(data: dict[str, Any], base: Settings = DEFAULT_SETTINGS) -> Settings:
    unknown = sorted(set(data) - {"analysis", "graph"})
    if unknown:
        raise ConfigError(f"Unknown settings section(s): {', '.join(unknown)}")
    settings = Settings(
        analysis=_section(AnalysisConfig, base.analysis, "analysis", data.get("analysis")),
        graph=_section(GraphConfig, base.graph, "graph", data.get("graph")),
    )
    return validate_settings(settings)


def load_settings(path: Path | None = None) -> Settings:
    if path is None:
        return DEFAULT_SETTINGS

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file '{path}' does not exist") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{path}': {e}") from e

    if data is None:
        logging.debug(f"Config file {path} is empty, using defaults")
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level")

    settings = settings_from_dict(data)
    logging.info(f"Loaded settings from {path}")
    return settings
