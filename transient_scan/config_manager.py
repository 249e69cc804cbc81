"""Persisted settings for transient-scan using TOML files."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import toml

from . import config
from .verdict import VersionPolicy

logger = logging.getLogger(__name__)


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections).

    Returns an empty dict when the file is missing or unreadable.
    """
    if not config.CONFIG_FILE.exists():
        return {}
    try:
        with open(config.CONFIG_FILE, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config.CONFIG_FILE, exc)
        return {}


def _save_full_config(data: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    try:
        config.CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(config.CONFIG_FILE, "w") as f:
            toml.dump(data, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", config.CONFIG_FILE, exc)
        return False


# ------------------------------------------------------------------
# Version policy
# ------------------------------------------------------------------

def load_version_policy() -> VersionPolicy:
    """Load the ``[policy]`` section, falling back to built-in defaults."""
    section = load_full_config().get("policy", {})
    if not isinstance(section, dict):
        section = {}
    try:
        return VersionPolicy.from_dict(section)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid [policy] section, using defaults: %s", exc)
        return VersionPolicy()


def save_version_policy(policy: VersionPolicy) -> bool:
    """Save the version policy. Preserves ``[scan]`` and other sections."""
    data = load_full_config()
    data["policy"] = policy.to_dict()
    return _save_full_config(data)


def clear_version_policy() -> bool:
    """Remove ``[policy]`` section, resetting to defaults."""
    data = load_full_config()
    data.pop("policy", None)
    return _save_full_config(data)


# ------------------------------------------------------------------
# Scan settings
# ------------------------------------------------------------------

def load_ignored_dirs() -> List[str]:
    """Directory names skipped during discovery (``[scan] ignored_dirs``)."""
    section = load_full_config().get("scan", {})
    if not isinstance(section, dict):
        return list(config.DEFAULT_IGNORED_DIRS)
    dirs = section.get("ignored_dirs")
    if not isinstance(dirs, list):
        return list(config.DEFAULT_IGNORED_DIRS)
    return [str(d) for d in dirs]
