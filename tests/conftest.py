from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure repo root is importable when running pytest from any CWD.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from hexasphere import topology  # noqa: E402


@pytest.fixture(scope="session")
def small_topology():
    """Two divisions: 42 tiles, 12 pentagons and 30 hexagons."""
    return topology.build(1.0, 2, 1.0)


@pytest.fixture(scope="session")
def medium_topology():
    """Four divisions: 162 tiles."""
    return topology.build(2.5, 4, 0.9)
