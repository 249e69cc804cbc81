"""Pytest configuration and fixtures for transient-scan tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Point the persisted config at a per-test location.

    Keeps a developer's ~/.tscan/config.toml from changing policy or
    ignored directories under test.
    """
    base_dir = tmp_path / "tscan_home"
    monkeypatch.setattr("transient_scan.config.BASE_DIR", base_dir)
    monkeypatch.setattr("transient_scan.config.CONFIG_FILE", base_dir / "config.toml")
    return base_dir


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample Foundry project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def inherited_collision_files():
    """Two files where a child's transient delete meets the parent's mapping delete."""
    file_a = (
        "a.sol",
        "contract A { mapping(uint256=>address) public m; "
        "function f(uint256 id) external { delete m[id]; } }",
    )
    file_b = (
        "b.sol",
        "contract B is A { address transient t; "
        "function g() external { delete t; } }",
    )
    return [file_a, file_b]
