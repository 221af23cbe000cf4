"""Shared pytest fixtures for webbase test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def store():
    """Provide an empty bundle store isolated from the process-wide one."""
    from webbase.localize.store import BundleStore

    return BundleStore()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Run the test from an empty working directory."""
    root = tmp_path.resolve() / "work"
    root.mkdir()
    monkeypatch.chdir(root)
    yield root
