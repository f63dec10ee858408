# tests/conftest.py
import os
import subprocess
import sys
from pathlib import Path

import pytest

from algoscope.config import AnalysisConfig, GraphConfig
from algoscope.pipeline import InMemoryStore

PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / "src"

LINEAR_SUM_C = "int sum(int *a, int n) {\n    int s = 0;\n    for (int i = 0; i < n; i++) {\n        s += a[i];\n    }\n    return s;\n}\n"

MATRIX_CPP = (
    "void clear(int n) {\n"
    "    for (int i = 0; i < n; i++) {\n"
    "        for (int j = 0; j < n; j++) {\n"
    "            c[i][j] = 0;\n"
    "        }\n"
    "    }\n"
    "}\n"
)

HALVING_RECURSION_C = "int f(int n) {\n    if (n <= 1) return 1;\n    return f(n / 2) + f(n / 2);\n}\n"

TWO_SUM_PY = (
    "def two_sum(nums, target):\n"
    "    seen = dict()\n"
    "    for i, x in enumerate(nums):\n"
    "        if target - x in seen:\n"
    "            return [seen[target - x], i]\n"
    "        seen[x] = i\n"
)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fast_analysis_config():
    return AnalysisConfig(workers=2, max_retries=2, retry_delay=0.0)


@pytest.fixture
def graph_config():
    return GraphConfig(similarity_threshold=0.1, recommendation_limit=5, rebuild_timeout=None)


@pytest.fixture
def temp_project(tmp_path):
    """Two authors with overlapping techniques plus noise that must be ignored."""
    root = tmp_path / "algoscope_test_project"
    (root / "alice").mkdir(parents=True)
    (root / "bob").mkdir()
    (root / "carol").mkdir()
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "alice" / "sum.c").write_text(LINEAR_SUM_C, encoding="utf-8")
    (root / "alice" / "matrix.cpp").write_text(MATRIX_CPP, encoding="utf-8")
    (root / "bob" / "halve.c").write_text(HALVING_RECURSION_C, encoding="utf-8")
    (root / "bob" / "scan.c").write_text(LINEAR_SUM_C, encoding="utf-8")
    (root / "carol" / "two_sum.py").write_text(TWO_SUM_PY, encoding="utf-8")
    (root / "carol" / "notes.md").write_text("# not code\n", encoding="utf-8")
    (root / "node_modules" / "lib" / "index.js").write_text("for (;;) { }\n", encoding="utf-8")
    (root / "alice" / "blob.c").write_bytes(b"int x;\x00\x01\x02")
    yield root


def run_algoscope_subprocess(args, cwd=None, **kwargs):
    """Run algoscope as a subprocess with ``src`` on PYTHONPATH.

    Returns the CompletedProcess; output is captured as UTF-8 text.
    """
    command = [sys.executable, "-m", "algoscope"] + args

    env = os.environ.copy()
    pythonpath = str(SRC_DIR)
    if "PYTHONPATH" in env:
        pythonpath = f"{pythonpath}{os.pathsep}{env['PYTHONPATH']}"
    env["PYTHONPATH"] = pythonpath
    if "env" in kwargs:
        env.update(kwargs["env"])
    kwargs["env"] = env

    kwargs.setdefault("capture_output", True)
    kwargs.setdefault("text", True)
    kwargs.setdefault("encoding", "utf-8")
    kwargs.setdefault("errors", "replace")

    return subprocess.run(command, cwd=cwd, **kwargs)
