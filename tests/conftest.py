"""
Shared pytest fixtures for the earnings-call misstatement pipeline tests.

This module provides common fixtures used across test modules:
- Project paths
- A temporary project root so pipeline stages write under tmp_path

Usage:
    Fixtures are automatically discovered by pytest.
    Import them directly in test files - no explicit import needed.
"""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import settings


# ===========================
# Path Fixtures
# ===========================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def tmp_project(tmp_path: Path, monkeypatch) -> Path:
    """
    Point settings.paths at an empty project root under tmp_path.

    All derived directories (data/raw, data/interim, models/...) follow.
    """
    monkeypatch.setattr(settings.paths, "project_root", tmp_path)
    settings.paths.ensure_directories()
    return tmp_path
