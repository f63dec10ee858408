from __future__ import annotations

import logging
import os
from pathlib import Path

import pathspec

IGNORE_FILENAMES = (".gitignore", ".algoscopeignore")

# Never descended into while collecting nested ignore files.
PRUNE_DIRS = frozenset(
    {
        ".git",
        ".svn",
        ".hg",
        "__pycache__",
        "node_modules",
        "venv",
        ".venv",
        ".tox",
        ".nox",
        "target",
        "vendor",
        "dist",
        "build",
    }
)

DEFAULT_IGNORE_PATTERNS = [
    # Version control
    "**/.git/",
    "**/.svn/",
    "**/.hg/",
    # Environments and dependencies
    "**/__pycache__/",
    "**/venv/",
    "**/.venv/",
    "**/.tox/",
    "**/.nox/",
    "**/node_modules/",
    "**/vendor/",
    # Build output
    "**/target/",
    "**/dist/",
    "**/build/",
    "**/.*_cache/",
    # Generated and minified sources skew loop and pattern counts
    "**/*.min.js",
    "**/*.pb.go",
    "**/*_pb2.py",
    # Default report files
    "**/algoscope.yaml",
    "**/algoscope.json",
    "**/algoscope.md",
    "**/algoscope.txt",
]


def read_ignore_file(file_path: Path) -> list[str]:
    if not file_path.is_file():
        return []

    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        logging.warning(f"Could not decode ignore file {file_path} as UTF-8: {e}")
        return []
    except OSError as e:
        logging.warning(f"Could not read ignore file {file_path}: {e}")
        return []

    patterns = [line.rstrip() for line in text.splitlines() if line.strip() and not line.startswith("#")]
    logging.info(f"Using ignore patterns from {file_path}")
    logging.debug(f"Read ignore patterns from {file_path}: {patterns}")
    return patterns


def _anchor(line: str, rel: str) -> str:
    # Re-root a pattern from a nested ignore file so it applies below its own directory.
    negated = line.startswith("!")
    pattern = line[1:] if negated else line

    if "/" in pattern:
        anchored = pattern.lstrip("/")
        pattern = f"/{rel}/{anchored}" if rel else f"/{anchored}"
    elif rel:
        pattern = f"{rel}/**/{pattern}"

    return "!" + pattern if negated else pattern


def collect_ignore_patterns(root: Path) -> list[str]:
    patterns: list[str] = []

    for dirpath, dirnames, filenames in os.walk(root, topdown=True):
        dirnames[:] = sorted(d for d in dirnames if d not in PRUNE_DIRS and not d.endswith("_cache"))
        current = Path(dirpath)
        rel = "" if current == root else current.relative_to(root).as_posix()

        for name in IGNORE_FILENAMES:
            if name in filenames:
                patterns.extend(_anchor(line, rel) for line in read_ignore_file(current / name))

    logging.debug(f"Collected {len(patterns)} ignore patterns under {root}")
    return patterns


def _output_pattern(output_file: Path | None, root: Path) -> str | None:
    if output_file is None:
        return None
    try:
        relative = output_file.resolve().relative_to(root.resolve())
    except (ValueError, OSError):
        return None
    return f"/{relative.as_posix()}"


def get_ignore_specs(
    root_dir: Path,
    custom_ignore_file: Path | None = None,
    no_default_ignores: bool = False,
    output_file: Path | None = None,
) -> pathspec.PathSpec:
    patterns: list[str] = []

    if not no_default_ignores:
        patterns.extend(DEFAULT_IGNORE_PATTERNS)
        patterns.extend(collect_ignore_patterns(root_dir))

    if custom_ignore_file:
        patterns.extend(read_ignore_file(custom_ignore_file))

    output_pattern = _output_pattern(output_file, root_dir)
    if output_pattern and output_pattern not in patterns:
        patterns.append(output_pattern)
        logging.debug(f"Adding report file to ignores: {output_pattern}")

    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def should_ignore(relative_path: str, spec: pathspec.PathSpec) -> bool:
    return spec.match_file(relative_path)
