"""Root test configuration: session-level cleanup of runtime artifacts"""

import os
import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["mdblog.db", "test.db"]
_CLEANUP_DIRS = [".mdblog"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files and staging directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep MDBLOG_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("MDBLOG_"):
            monkeypatch.delenv(key)
