"""Pytest configuration for the runml test suite."""

import sys
from pathlib import Path

import pytest

# Add the repository root to the path so runml imports without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

from runml import Logger  # noqa: E402


@pytest.fixture
def logger():
    return Logger(verbose=False)


@pytest.fixture
def ml_file(tmp_path):
    """Write an ml program into the test's temporary directory."""

    def write(source: str, name: str = "program.ml") -> Path:
        path = tmp_path / name
        path.write_text(source)
        return path

    return write
