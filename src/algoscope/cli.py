import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

from .version import __version__

DEFAULT_MAX_FILE_BYTES = 1024 * 1024  # 1 MB


@dataclass
class ParsedArgs:
    root: Path
    ignore_file: Optional[Path]
    output_file: Optional[Path]
    no_default_ignores: bool
    verbosity: int
    output_format: str
    max_file_bytes: Optional[int]
    by_author: bool
    threshold: Optional[float]
    top: Optional[int]
    workers: Optional[int]
    config_file: Optional[Path]


DEFAULT_IGNORES_HELP = """
Recognised sources: C/C++, C#, Java, Kotlin, Scala, Go, Rust, Swift,
JavaScript/TypeScript, Python, Ruby, PHP, Dart, Objective-C and a few more.

Default ignored patterns (use --no-default-ignores to include all):
  .git/, .svn/, .hg/          Version control directories
  __pycache__/, venv/, .tox/  Python environments
  node_modules/, vendor/      Dependencies
  target/, dist/, build/      Build output
  *.min.js, *.pb.go, *_pb2.py Generated sources
  algoscope.{yaml,json,md,txt} Default report files

Ignore files (hierarchical, like git):
  .gitignore            Standard git ignore patterns
  .algoscopeignore      algoscope-specific patterns

With --by-author the first directory under PATH names the author of every
file below it, and the report gains an author similarity section.
"""


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def parse_args(argv: Optional[list[str]] = None) -> ParsedArgs:
    parser = argparse.ArgumentParser(
        prog="algoscope",
        description="Detect algorithmic patterns and estimate Big-O complexity of source files.",
        epilog=DEFAULT_IGNORES_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("path", nargs="?", default=".", help="Source file or directory to analyze")
    parser.add_argument("-i", "--ignore-file", default=None, help="Path to custom ignore file")
    parser.add_argument(
        "-o",
        "--output-file",
        nargs="?",
        const="",
        default=None,
        help="Output file (default: stdout, use '-' for stdout, omit filename for algoscope.{ext})",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["yaml", "yml", "json", "txt", "md"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    parser.add_argument("--no-default-ignores", action="store_true", help="Disable all default ignores")
    parser.add_argument(
        "--max-file-bytes",
        type=int,
        default=DEFAULT_MAX_FILE_BYTES,
        metavar="N",
        help=f"Skip files larger than N bytes (default: {DEFAULT_MAX_FILE_BYTES // 1024} KB, use 0 for unlimited)",
    )
    parser.add_argument("--by-author", action="store_true", help="Group files by author and build the similarity graph")
    parser.add_argument("--threshold", type=float, default=None, metavar="T", help="Minimum similarity for an edge (default: 0.1)")
    parser.add_argument("--top", type=int, default=None, metavar="N", help="Recommendations per author (default: 5)")
    parser.add_argument("--workers", type=int, default=None, metavar="N", help="Analysis worker threads (default: 4)")
    parser.add_argument("--config", default=None, metavar="FILE", help="YAML settings file")
    parser.add_argument(
        "--log-level",
        choices=["error", "warning", "info", "debug"],
        default="error",
        help="Log level (default: error)",
    )

    args = parser.parse_args(argv)

    if args.max_file_bytes < 0:
        _fail(f"--max-file-bytes must be non-negative, got {args.max_file_bytes}")
    if args.threshold is not None and not 0.0 <= args.threshold <= 1.0:
        _fail(f"--threshold must be within [0, 1], got {args.threshold}")
    if args.top is not None and args.top < 1:
        _fail(f"--top must be at least 1, got {args.top}")
    if args.workers is not None and args.workers < 1:
        _fail(f"--workers must be at least 1, got {args.workers}")

    try:
        root = Path(args.path).resolve(strict=True)
    except FileNotFoundError:
        _fail(f"Path '{args.path}' does not exist.")
    except OSError as e:
        _fail(f"Cannot access '{args.path}': {e}")

    output_format = "yaml" if args.format == "yml" else args.format

    output_file = None
    if args.output_file is not None and args.output_file != "-":
        if args.output_file == "":
            output_file = Path(f"algoscope.{output_format}").resolve()
        else:
            output_file = Path(args.output_file).resolve()
            if output_file.is_dir():
                _fail(f"'{args.output_file}' is a directory, not a file.")

    ignore_file = None
    if args.ignore_file:
        ignore_file = Path(args.ignore_file).resolve()
        if not ignore_file.is_file():
            _fail(f"Ignore file '{args.ignore_file}' does not exist.")

    config_file = None
    if args.config:
        config_file = Path(args.config).resolve()

    log_level_map = {"error": 0, "warning": 1, "info": 2, "debug": 3}

    return ParsedArgs(
        root=root,
        ignore_file=ignore_file,
        output_file=output_file,
        no_default_ignores=args.no_default_ignores,
        verbosity=log_level_map[args.log_level],
        output_format=output_format,
        max_file_bytes=args.max_file_bytes if args.max_file_bytes > 0 else None,
        by_author=args.by_author,
        threshold=args.threshold,
        top=args.top,
        workers=args.workers,
        config_file=config_file,
    )
