from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

from .ignore import should_ignore

MAX_SAFE_FILE_SIZE = 100 * 1024 * 1024  # 100 MB - ceiling when no limit is given

CODE_EXTENSIONS = {
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".cs": "csharp",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    ".go": "go",
    ".rs": "rust",
    ".swift": "swift",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".py": "python",
    ".pyw": "python",
    ".rb": "ruby",
    ".php": "php",
    ".dart": "dart",
    ".m": "objectivec",
    ".mm": "objectivec",
    ".groovy": "groovy",
    ".lua": "lua",
    ".pl": "perl",
    ".sh": "bash",
    ".zig": "zig",
    ".d": "d",
}


@dataclass(frozen=True)
class SourceFile:
    path: str
    language: str
    content: str
    author: str | None = None


@dataclass
class SourceCollection:
    files: list[SourceFile] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class CollectContext:
    base_dir: Path
    combined_spec: pathspec.PathSpec
    max_file_bytes: int | None = None
    by_author: bool = False


def language_for(path: Path) -> str | None:
    return CODE_EXTENSIONS.get(path.suffix.lower())


def collect_sources(root: Path, ctx: CollectContext) -> SourceCollection:
    """Gather every recognised source file under ``root`` in path order.

    ``root`` may also be a single file. With ``ctx.by_author`` the first
    directory component below the root names the author; files sitting
    directly in the root have no author and are left out of the graph.
    """
    collection = SourceCollection()
    if root.is_file():
        _add_file(root, root.name, ctx, collection)
        return collection
    _walk(root, ctx, collection)
    logging.info(f"Collected {len(collection.files)} source files, skipped {len(collection.skipped)}")
    return collection


def _walk(dir_path: Path, ctx: CollectContext, collection: SourceCollection) -> None:
    try:
        entries = sorted(dir_path.iterdir())
    except PermissionError:
        logging.warning(f"Permission denied accessing directory {dir_path}")
        return
    except OSError as e:
        logging.warning(f"Error accessing directory {dir_path}: {e}")
        return

    for entry in entries:
        try:
            relative = entry.relative_to(ctx.base_dir).as_posix()
            is_dir = entry.is_dir()
        except (OSError, ValueError) as e:
            logging.warning(f"Could not process path for entry {entry}: {e}")
            continue

        if should_ignore(relative + "/" if is_dir else relative, ctx.combined_spec):
            continue
        if entry.is_symlink():
            logging.debug(f"Skipping symlink '{relative}'")
            continue

        if is_dir:
            _walk(entry, ctx, collection)
        else:
            _add_file(entry, relative, ctx, collection)


def _author_of(relative: str) -> str | None:
    parts = relative.split("/")
    return parts[0] if len(parts) > 1 else None


def _add_file(path: Path, relative: str, ctx: CollectContext, collection: SourceCollection) -> None:
    language = language_for(path)
    if language is None:
        return

    content, reason = read_source(path, ctx.max_file_bytes)
    if content is None:
        collection.skipped.append((relative, reason))
        return

    author = _author_of(relative) if ctx.by_author else None
    collection.files.append(SourceFile(path=relative, language=language, content=content, author=author))


def read_source(file_path: Path, max_file_bytes: int | None) -> tuple[str | None, str]:
    """Return ``(content, "")`` or ``(None, reason)`` when the file cannot be analyzed."""
    try:
        file_size = file_path.stat().st_size
        limit = max_file_bytes if max_file_bytes is not None else MAX_SAFE_FILE_SIZE
        if file_size > limit:
            logging.info(f"Skipping large file {file_path.name}: {file_size} bytes > {limit} bytes")
            return None, f"file too large: {file_size} bytes"

        raw = file_path.read_bytes()
        if b"\x00" in raw:
            logging.debug(f"Detected binary file {file_path.name}")
            return None, "binary file"

        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        logging.error(f"Cannot decode {file_path.name} as UTF-8. Skipping.")
        return None, "not utf-8"
    except PermissionError:
        logging.error(f"Could not read {file_path.name}: Permission denied")
        return None, "permission denied"
    except OSError as e:
        logging.error(f"Could not read {file_path.name}: {e}")
        return None, "unreadable"

    return content.replace("\r\n", "\n").replace("\r", "\n"), ""
