#!/usr/bin/env python3
"""
Shared fixtures for the storage tests
"""

import pytest
from unittest.mock import AsyncMock, Mock
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from civic_reports.storage import MemoryStorage, ReportsStorage

@pytest.fixture
def medium():
    """Fresh in-memory storage medium."""
    return MemoryStorage()

@pytest.fixture
def reports_storage(medium, tmp_path):
    """Reports storage backed by the in-memory medium."""
    return ReportsStorage(medium, export_dir=tmp_path)

@pytest.fixture
def sample_reports():
    """Reports covering every status and priority."""
    return [
        {'id': 'r1', 'status': 'new', 'priority': 'high', 'hasImages': True,
         'email': 'ahmed.mohamed@example.com', 'title': 'Broken streetlight'},
        {'id': 'r2', 'status': 'new', 'priority': 'low', 'hasImages': False,
         'email': 'fatima.ali@example.com', 'title': 'Pothole'},
        {'id': 'r3', 'status': 'resolved', 'priority': 'urgent', 'hasImages': True,
         'email': 'ahmed.mohamed@example.com', 'title': 'Water leak'},
    ]

@pytest.fixture
def mock_remote():
    """Configured remote store whose calls all succeed."""
    remote = Mock()
    remote.is_configured = True
    remote.get_all_with_counts = AsyncMock(return_value=([], None))
    remote.get_by_id = AsyncMock(return_value=(None, None))
    remote.insert = AsyncMock(return_value=({'id': 42}, None))
    remote.update = AsyncMock(return_value=({'id': 42}, None))
    remote.delete = AsyncMock(return_value=None)
    return remote
