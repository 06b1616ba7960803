"""Fixtures for CLI tests running against real directories."""

from pathlib import Path

import pytest


@pytest.fixture
def roots(tmp_path: Path) -> tuple[Path, Path]:
    """Create empty mirror and target directories."""
    mirror = tmp_path / "mirror"
    target = tmp_path / "real"
    mirror.mkdir()
    target.mkdir()
    return mirror, target
