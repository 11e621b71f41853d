"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Put src and the project root on sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root / "src", project_root):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def _isolated_metadata_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host LAYER_METADATA_* variables out of config parsing."""
    for name in (
        "LAYER_METADATA_ROOT",
        "LAYER_METADATA_FLUSH_INTERVAL",
        "LAYER_METADATA_CACHE_EXPIRY",
        "LAYER_METADATA_MAX_RW_ATTEMPTS",
        "LAYER_METADATA_WAIT_AFTER_RENAME",
    ):
        monkeypatch.delenv(name, raising=False)
