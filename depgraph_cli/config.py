"""Default paths and analysis settings for depgraph."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("DEPGRAPH_HOME", str(Path.home() / ".depgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Resolution order for curly-brace relative imports
DEFAULT_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs"]
PYTHON_EXTENSIONS = [".py", ".pyi"]

CURLY_BRACE_EXTENSIONS = {".ts", ".tsx", ".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs"}
INDENTATION_EXTENSIONS = {".py", ".pyw", ".pyi"}

SKIP_DIRS = {
    ".venv", "venv", "__pycache__", "node_modules", ".git",
    "site-packages", ".tox", ".pytest_cache", "build", "dist",
    ".mypy_cache", ".ruff_cache", "htmlcov", ".eggs",
    "coverage", ".next", ".depgraph",
}

DEFAULT_DAMPING_FACTOR = 0.85
DEFAULT_MAX_ITERATIONS = 100
MIN_PAGERANK_ITERATIONS = 30
DEFAULT_TOLERANCE = 1e-6
DEFAULT_MIN_CLUSTER_SIZE = 2
DEFAULT_BRIDGE_TOP_K = 10
DEFAULT_MAX_MERMAID_NODES = 50
