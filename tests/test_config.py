#!/usr/bin/env python3
"""
Unit tests for configuration and storage factories
"""

import pytest
import logging
from unittest.mock import patch
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

import civic_reports.storage as storage_module
from civic_reports.storage import MemoryStorage, init_storage, get_reports_storage, get_users_storage
from civic_reports.utils.config import Config, configure_logging, get_config

class TestConfig:
    """Test cases for Config."""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = Config(_env_file=None)

        assert config.storage_dir == "data"
        assert config.reports_storage_key == "local_reports"
        assert config.users_storage_key == "local_users"
        assert config.use_remote_store is True
        assert config.remote_configured is False
        assert config.is_production is True

    def test_environment_overrides(self):
        env = {
            "STORAGE_DIR": "/tmp/civic",
            "USE_REMOTE_STORE": "false",
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_KEY": "test-key",
        }
        with patch.dict("os.environ", env, clear=True):
            config = Config(_env_file=None)

        assert config.storage_dir == "/tmp/civic"
        assert config.use_remote_store is False
        assert config.remote_configured is True

    def test_get_config_returns_singleton(self):
        assert get_config() is get_config()

    def test_configure_logging(self):
        with patch("civic_reports.utils.config.logging.basicConfig") as mock_basic:
            configure_logging("debug")
        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG

class TestStorageFactories:
    """Test cases for the global storage helpers."""

    @pytest.fixture(autouse=True)
    def reset_globals(self):
        yield
        storage_module._reports_storage = None
        storage_module._users_storage = None

    def test_init_storage_local_only(self, tmp_path):
        config = Config(_env_file=None, storage_dir=str(tmp_path), supabase_url="", supabase_key="")

        users = init_storage(config)

        assert users is get_users_storage()
        assert not users.is_remote
        assert get_reports_storage().storage_key == "local_reports"
        assert (tmp_path / "local_users.json").exists()

    def test_init_storage_remote(self):
        config = Config(
            _env_file=None,
            supabase_url="https://test.supabase.co",
            supabase_key="test-key",
            use_remote_store=True
        )
        medium = MemoryStorage()

        users = init_storage(config, medium=medium)

        assert users.is_remote
        assert medium.get_item("local_users") is None
