from __future__ import annotations

_QUOTES = ('"', "'")


def _blank(char: str) -> str:
    return "\n" if char == "\n" else " "


def _skip_line_comment(src: str, i: int, out: list[str]) -> int:
    n = len(src)
    while i < n and src[i] != "\n":
        out.append(" ")
        i += 1
    return i


def _skip_block_comment(src: str, i: int, out: list[str]) -> int:
    # i points just past the opening "/*"
    n = len(src)
    while i < n:
        if src[i] == "*" and i + 1 < n and src[i + 1] == "/":
            out.append("  ")
            return i + 2
        out.append(_blank(src[i]))
        i += 1
    return i


def _skip_literal(src: str, i: int, quote: str, out: list[str]) -> int:
    # i points just past the opening quote
    n = len(src)
    while i < n:
        char = src[i]
        if char == "\\":
            out.append(" ")
            i += 1
            if i < n:
                out.append(_blank(src[i]))
                i += 1
            continue
        out.append(_blank(char))
        i += 1
        if char == quote:
            return i
    return i


def strip_comments_and_strings(src: str) -> str:
    """Blank out comments and string/char literals in one left-to-right pass.

    The result has exactly the same length as ``src``: removed characters
    become spaces and newlines are kept, so line numbers and offsets stay
    valid. Unterminated comments and literals run to end of input.
    """
    out: list[str] = []
    i, n = 0, len(src)

    while i < n:
        char = src[i]
        nxt = src[i + 1] if i + 1 < n else ""

        if char == "/" and nxt == "*":
            out.append("  ")
            i = _skip_block_comment(src, i + 2, out)
        elif char == "/" and nxt == "/":
            i = _skip_line_comment(src, i, out)
        elif char == "#":
            i = _skip_line_comment(src, i, out)
        elif char in _QUOTES:
            out.append(" ")
            i = _skip_literal(src, i + 1, char, out)
        else:
            out.append(char)
            i += 1

    return "".join(out)
