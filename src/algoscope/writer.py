from __future__ import annotations

import io
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, TextIO

_YAML_ESCAPE_PATTERN = re.compile(r'[\\"\n\t\r\x00\x85\u2028\u2029]')
_YAML_ESCAPE_MAP = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\x00": "\\0",
    "\x85": "\\x85",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_MD_CELL_ESCAPE_PATTERN = re.compile(r"[|\\`*_]")


def _q(s: str) -> str:
    s = str(s)
    if _YAML_ESCAPE_PATTERN.search(s):
        s = _YAML_ESCAPE_PATTERN.sub(lambda m: _YAML_ESCAPE_MAP[m.group()], s)
    return f'"{s}"'


def _write_yaml_list(file: TextIO, key: str, items: list[str], indent: str) -> None:
    if not items:
        file.write(f"{indent}{key}: []\n")
        return
    file.write(f"{indent}{key}:\n")
    for item in items:
        file.write(f"{indent}  - {_q(item)}\n")


def _write_yaml_file(file: TextIO, entry: dict[str, Any]) -> None:
    file.write(f"  - path: {_q(entry['path'])}\n")
    file.write(f"    language: {entry['language']}\n")
    if "author" in entry:
        file.write(f"    author: {_q(entry['author'])}\n")
    file.write(f"    time_complexity: {_q(entry['time_complexity'])}\n")
    file.write(f"    space_complexity: {_q(entry['space_complexity'])}\n")
    _write_yaml_list(file, "patterns", entry["patterns"], "    ")


def _write_yaml_author(file: TextIO, author: dict[str, Any]) -> None:
    file.write(f"  - author: {_q(author['author'])}\n")
    file.write("    patterns:\n")
    for label, count in author["patterns"].items():
        file.write(f"      {_q(label)}: {count}\n")
    if not author["recommendations"]:
        file.write("    recommendations: []\n")
        return
    file.write("    recommendations:\n")
    for rec in author["recommendations"]:
        file.write(f"      - author: {_q(rec['author'])}\n")
        file.write(f"        similarity: {rec['similarity']}\n")
        _write_yaml_list(file, "shared_patterns", rec["shared_patterns"], "        ")


def write_report_yaml(file: TextIO, report: dict[str, Any]) -> None:
    file.write(f"name: {_q(report['name'])}\n")
    file.write(f"type: {report['type']}\n")

    if report["files"]:
        file.write("files:\n")
        for entry in report["files"]:
            _write_yaml_file(file, entry)
    else:
        file.write("files: []\n")

    if report.get("skipped"):
        file.write("skipped:\n")
        for item in report["skipped"]:
            file.write(f"  - path: {_q(item['path'])}\n")
            file.write(f"    reason: {_q(item['reason'])}\n")
    elif "skipped" in report:
        file.write("skipped: []\n")

    if "authors" in report:
        if not report["authors"]:
            file.write("authors: []\n")
            return
        file.write("authors:\n")
        for author in report["authors"]:
            _write_yaml_author(file, author)


def write_report_json(file: TextIO, report: dict[str, Any]) -> None:
    json.dump(report, file, ensure_ascii=False, indent=2)
    file.write("\n")


def write_report_text(file: TextIO, report: dict[str, Any]) -> None:
    file.write(f"{report['name']}/\n")
    for entry in report["files"]:
        file.write(f"  {entry['path']} [{entry['language']}]  time {entry['time_complexity']}  space {entry['space_complexity']}\n")
        if entry["patterns"]:
            file.write(f"    patterns: {', '.join(entry['patterns'])}\n")

    if report.get("skipped"):
        file.write("\nSkipped:\n")
        for item in report["skipped"]:
            file.write(f"  {item['path']} ({item['reason']})\n")

    if report.get("authors"):
        file.write("\nAuthor similarity:\n")
        for author in report["authors"]:
            file.write(f"  {author['author']}\n")
            for rec in author["recommendations"]:
                shared = ", ".join(rec["shared_patterns"]) or "-"
                file.write(f"    {rec['author']}  {rec['similarity']:.4f}  shared: {shared}\n")


def _cell(value: str) -> str:
    return _MD_CELL_ESCAPE_PATTERN.sub(lambda m: "\\" + m.group(), value)


def write_report_markdown(file: TextIO, report: dict[str, Any]) -> None:
    file.write(f"# {report['name']}/\n\n")

    if report["files"]:
        file.write("| File | Time | Space | Patterns |\n")
        file.write("| --- | --- | --- | --- |\n")
        for entry in report["files"]:
            patterns = ", ".join(entry["patterns"]) or "-"
            file.write(
                f"| {_cell(entry['path'])} | {entry['time_complexity']} "
                f"| {entry['space_complexity']} | {_cell(patterns)} |\n"
            )
        file.write("\n")
    else:
        file.write("_(no source files)_\n\n")

    if report.get("skipped"):
        file.write("## Skipped\n\n")
        for item in report["skipped"]:
            file.write(f"- {_cell(item['path'])}: _{item['reason']}_\n")
        file.write("\n")

    if report.get("authors"):
        file.write("## Author similarity\n\n")
        for author in report["authors"]:
            file.write(f"### {author['author']}\n\n")
            if not author["recommendations"]:
                file.write("_(no similar authors)_\n\n")
                continue
            file.write("| Author | Similarity | Shared patterns |\n")
            file.write("| --- | --- | --- |\n")
            for rec in author["recommendations"]:
                shared = ", ".join(rec["shared_patterns"]) or "-"
                file.write(f"| {_cell(rec['author'])} | {rec['similarity']:.4f} | {_cell(shared)} |\n")
            file.write("\n")


def report_to_string(report: dict[str, Any], output_format: str = "yaml") -> str:
    buf = io.StringIO()
    if output_format == "json":
        write_report_json(buf, report)
    elif output_format == "txt":
        write_report_text(buf, report)
    elif output_format == "md":
        write_report_markdown(buf, report)
    else:
        write_report_yaml(buf, report)
    return buf.getvalue()


def write_string_to_file(content: str, output_file: Path | None, output_format: str = "yaml") -> None:
    if output_file is None:
        try:
            buf = sys.stdout.buffer
        except AttributeError:
            buf = None

        if buf:
            utf8_stdout = io.TextIOWrapper(buf, encoding="utf-8", newline="")
            try:
                utf8_stdout.write(content)
                utf8_stdout.flush()
            finally:
                utf8_stdout.detach()
        else:
            sys.stdout.write(content)
            sys.stdout.flush()
        logging.info(f"Report written to stdout in {output_format} format")
        return

    if output_file.is_dir():
        logging.error(f"Cannot write to '{output_file}': is a directory")
        raise IsADirectoryError(f"Is a directory: {output_file}")

    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(content, encoding="utf-8")
    except OSError as e:
        logging.error(f"Unable to write to file '{output_file}': {e}")
        raise
    logging.info(f"Report saved to {output_file} in {output_format} format")
