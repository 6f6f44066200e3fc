"""
Pytest configuration and fixtures for maledictum-importer tests.
"""

import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing maledictum_importer
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from maledictum_importer.settings import MemorySettingsStore  # noqa: E402


# Configure anyio to only use asyncio (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings_store() -> MemorySettingsStore:
    """Empty in-memory settings store."""
    return MemorySettingsStore()
