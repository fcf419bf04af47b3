from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'ai_sync'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


@pytest.fixture(autouse=True)
def _clear_ai_sync_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Developer shells may export AI_SYNC_* overrides; tests must be deterministic."""
    for key in list(os.environ):
        if key.startswith("AI_SYNC_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Repository root of this checkout."""
    return REPO_ROOT


@pytest.fixture
def isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty project with an `.ai/` directory, used as the working directory."""
    (tmp_path / ".ai").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path
