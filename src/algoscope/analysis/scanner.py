from __future__ import annotations

from .patterns import FUNCTION_DECL_RE, INDENT_LOOP_HEADER_RE
from .types import ScanResult

LOOP_KEYWORDS = frozenset({"for", "while", "do"})

# Identifiers the declaration shape can capture that never name a function.
NON_FUNCTION_KEYWORDS = frozenset(
    {
        "if",
        "else",
        "elif",
        "for",
        "while",
        "do",
        "switch",
        "case",
        "return",
        "break",
        "continue",
        "class",
        "struct",
        "namespace",
        "template",
        "typename",
        "int",
        "long",
        "double",
        "float",
        "bool",
        "void",
        "auto",
        "const",
        "static",
        "new",
        "delete",
        "try",
        "catch",
        "throw",
        "func",
        "def",
        "sizeof",
        "with",
        "assert",
        "yield",
        "raise",
        "await",
        "lambda",
        "in",
        "not",
        "and",
        "or",
    }
)

_HEADER_C = "c"
_HEADER_GO = "go"


def _is_ident_start(char: str) -> bool:
    return ("a" <= char <= "z") or ("A" <= char <= "Z") or char == "_"


def _is_ident_continue(char: str) -> bool:
    return _is_ident_start(char) or ("0" <= char <= "9")


class _LoopHeader:
    """Tracks a loop keyword that has been seen but whose body has not opened yet.

    ``style`` is decided by the first significant character after the keyword:
    ``(`` means a C-style header, anything else a Go/Python-style header.
    """

    __slots__ = ("paren_depth", "pending", "style")

    def __init__(self) -> None:
        self.pending = False
        self.style: str | None = None
        self.paren_depth = 0

    def open(self) -> None:
        self.pending = True
        self.style = None
        self.paren_depth = 0

    def cancel(self) -> None:
        self.pending = False
        self.style = None
        self.paren_depth = 0

    def decide(self, style: str) -> None:
        if self.pending and self.style is None:
            self.style = style


def _scan_braces(clean: str) -> tuple[int, int]:
    stack: list[bool] = []
    loop_depth = 0
    max_depth = 0
    num_blocks = 0
    header = _LoopHeader()
    i, n = 0, len(clean)

    while i < n:
        char = clean[i]

        if _is_ident_start(char):
            j = i + 1
            while j < n and _is_ident_continue(clean[j]):
                j += 1
            word = clean[i:j]
            if word in LOOP_KEYWORDS:
                header.open()
            else:
                header.decide(_HEADER_GO)
            i = j
            continue

        if char == "{":
            is_loop = header.pending and header.paren_depth == 0
            stack.append(is_loop)
            if is_loop:
                header.cancel()
                loop_depth += 1
                num_blocks += 1
                max_depth = max(max_depth, loop_depth)
        elif char == "}":
            if stack and stack.pop():
                loop_depth -= 1
            header.cancel()
        elif header.pending:
            if char == "(":
                header.decide(_HEADER_C)
                header.paren_depth += 1
            elif char == ")":
                header.paren_depth = max(0, header.paren_depth - 1)
            elif char == ";":
                if header.style != _HEADER_GO and header.paren_depth == 0:
                    header.cancel()
            elif char == "\n":
                if header.style == _HEADER_GO:
                    header.cancel()
            elif not char.isspace():
                header.decide(_HEADER_GO)
        i += 1

    return max_depth, num_blocks


def _scan_indentation(clean: str) -> tuple[int, int]:
    open_headers: list[int] = []
    max_depth = 0
    num_blocks = 0

    for line in clean.split("\n"):
        if not line.strip():
            continue
        indent = len(line) - len(line.lstrip())
        while open_headers and indent <= open_headers[-1]:
            open_headers.pop()
        if INDENT_LOOP_HEADER_RE.match(line):
            open_headers.append(indent)
            num_blocks += 1
            max_depth = max(max_depth, len(open_headers))

    return max_depth, num_blocks


def analyze_loop_structure(clean: str) -> tuple[int, int]:
    """Return ``(max_loop_depth, loop_block_count)`` for stripped source.

    Brace-delimited loop bodies are tracked with a stack of loop flags.
    Unbalanced braces are tolerated: closing an empty stack is ignored.
    The text is also scanned by indentation so that ``for ...:`` /
    ``while ...:`` headers count, and the deeper of the two scans wins.
    A brace inside a Python header, as in ``for x in {1, 2}:``, must not
    hide the indented loops below it.
    """
    return max(_scan_braces(clean), _scan_indentation(clean))


def extract_function_names(clean: str) -> tuple[str, ...]:
    seen: set[str] = set()
    names: list[str] = []
    for match in FUNCTION_DECL_RE.finditer(clean):
        name = match.group(1)
        if name in NON_FUNCTION_KEYWORDS or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return tuple(names)


def scan(clean: str) -> ScanResult:
    max_depth, num_blocks = analyze_loop_structure(clean)
    return ScanResult(
        clean=clean,
        max_loop_depth=max_depth,
        num_loop_blocks=num_blocks,
        function_names=extract_function_names(clean),
    )
