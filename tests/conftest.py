"""
Pytest configuration and fixtures
"""
from pathlib import Path
import sys
from typing import Callable, Dict

import pytest


# Define paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = PROJECT_ROOT / "src"

# Make the package importable without an editable install
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Path fixtures
@pytest.fixture(scope="session")
def project_root() -> Path:
    """Fixture providing path to project root"""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def src_root() -> Path:
    """Fixture providing path to the src directory"""
    return SRC_ROOT


def _write_tree(base: Path, files: Dict[str, bytes]) -> Dict[str, Path]:
    written: Dict[str, Path] = {}
    for rel_path, content in files.items():
        target = base / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        written[rel_path] = target
    return written


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Dict[str, bytes]], Path]:
    """
    Build a root directory from ``{relative path: bytes}`` and return it.

    The root always contains a ``w`` working directory, even when no file
    is placed in it.
    """

    def _make(files: Dict[str, bytes]) -> Path:
        root = tmp_path / "r"
        (root / "w").mkdir(parents=True, exist_ok=True)
        _write_tree(root, files)
        return root

    return _make


def pytest_sessionfinish(session, exitstatus):
    # tmp_path cleanup runs shutil.rmtree, which recurses once per directory
    # level; give it room for the deep-nesting walker test's tree.
    sys.setrecursionlimit(max(sys.getrecursionlimit(), 20000))
