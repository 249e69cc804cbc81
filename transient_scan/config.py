"""Configuration paths and scan defaults for transient-scan."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("TSCAN_HOME", str(Path.home() / ".tscan"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

SOURCE_SUFFIX = ".sol"

# Directories never descended into during source discovery. Vendored
# libraries (lib/) are scanned on purpose.
DEFAULT_IGNORED_DIRS = (
    "node_modules", "test", "out", "artifacts", "cache",
    "typechain-types", ".git", "coverage",
)

BUILD_CONFIG_FILES = ("foundry.toml", "hardhat.config.js", "hardhat.config.ts")

# How many directories upward (starting at the target) to look for a build config
CONFIG_SEARCH_DEPTH = 3

