"""Configuration paths and analysis defaults for ModGraph."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("MODGRAPH_HOME", str(Path.home() / ".modgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Paths under these prefixes are reported as standard library.
DEFAULT_TRUSTED_STDLIB_PREFIXES = ["golang.org/x/"]
DEFAULT_TEST_SUFFIX = "_test"
# Maximum symbols returned by a package listing before truncation.
DEFAULT_SYMBOL_LIMIT = 200
DEFAULT_GO_BINARY = os.environ.get("MODGRAPH_GO", "go")


def ensure_base_dirs() -> None:
    """Create the base directory for local configuration if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
