import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'cbt' and tests/ importable for 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from cbt.core.logging_setup import reset_stdlib_logging_for_tests


@pytest.fixture(autouse=True)
def _isolate_cbt_state(monkeypatch: pytest.MonkeyPatch):
    """Clear CBT_* env overrides and cbt-installed log handlers around every test."""
    for key in list(os.environ):
        if key.startswith("CBT_"):
            monkeypatch.delenv(key, raising=False)
    reset_stdlib_logging_for_tests()
    yield
    reset_stdlib_logging_for_tests()


@pytest.fixture
def packages_root(tmp_path: Path) -> Path:
    """An existing, empty packages directory."""
    root = tmp_path / "packages"
    root.mkdir()
    return root
