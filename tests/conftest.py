import sys
from pathlib import Path

import pytest

# Add src directory to sys.path to allow importing sqlbridge without installation
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir / "src"))

import sqlbridge  # noqa: E402


@pytest.fixture
def db():
    """An in-memory database, closed after the test if still open."""
    handle = sqlbridge.open(":memory:", sqlbridge.BridgeConfig())
    yield handle
    if not handle.closed:
        handle.close()


@pytest.fixture
def lenient_db():
    handle = sqlbridge.open(":memory:", sqlbridge.BridgeConfig(strict_params=False))
    yield handle
    if not handle.closed:
        handle.close()
