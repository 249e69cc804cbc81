"""Locate Solidity sources and the Foundry/Hardhat build config on disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from . import config
from .models import BuildConfigFile, SourceFile

logger = logging.getLogger(__name__)


def find_source_files(target: Path, ignored_dirs: Optional[Sequence[str]] = None) -> List[Path]:
    """Collect ``.sol`` files under ``target`` in a stable, sorted order.

    A file target yields itself when it has the Solidity suffix.
    """
    ignored = set(config.DEFAULT_IGNORED_DIRS if ignored_dirs is None else ignored_dirs)
    if target.is_file():
        return [target] if target.suffix == config.SOURCE_SUFFIX else []
    if not target.is_dir():
        return []

    found: List[Path] = []
    for entry in sorted(target.iterdir()):
        if entry.is_dir():
            if entry.name not in ignored:
                found.extend(find_source_files(entry, ignored_dirs=list(ignored)))
        elif entry.suffix == config.SOURCE_SUFFIX:
            found.append(entry)
    return found


def load_sources(paths: Iterable[Path]) -> List[SourceFile]:
    """Read files as UTF-8; unreadable files are skipped with a warning."""
    sources = []
    for path in paths:
        try:
            sources.append(SourceFile(path=str(path), text=path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", path, exc)
    logger.info("Loaded %d Solidity files", len(sources))
    return sources


def _config_in(directory: Path) -> Optional[BuildConfigFile]:
    for name in config.BUILD_CONFIG_FILES:
        candidate = directory / name
        if candidate.is_file():
            try:
                return BuildConfigFile(name=name, content=candidate.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Failed to read %s: %s", candidate, exc)
    return None


def find_build_config(target: Path, cwd: Optional[Path] = None) -> BuildConfigFile:
    """Search upward from ``target`` for a build config, then the cwd.

    A target nested in ``src/`` still finds the project's ``foundry.toml``.
    """
    current = target if target.is_dir() else target.parent
    for _ in range(config.CONFIG_SEARCH_DEPTH):
        found = _config_in(current)
        if found:
            logger.info("Using build config %s", current / found.name)
            return found
        if current.parent == current:
            break
        current = current.parent

    found = _config_in(cwd or Path.cwd())
    if found:
        return found
    return BuildConfigFile(name="None", content="")
