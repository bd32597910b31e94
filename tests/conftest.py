"""Shared fixtures for projectmap tests."""

import pytest

from projectmap.config import ProjectMapConfig
from projectmap.models import MemoryRecordStore


@pytest.fixture
def config(tmp_path):
    """Config with a known secret and a temporary log directory."""
    return ProjectMapConfig(
        webhook_secret="test-secret",
        map_label="Website Map",
        store_backend="memory",
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def store():
    return MemoryRecordStore()
