#!/usr/bin/env python3
"""
Configuration management for the civic reports storage layer.
"""

import logging
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Config(BaseSettings):
    """Application configuration settings."""

    # Local storage configuration
    storage_dir: str = Field(default="data", env="STORAGE_DIR")
    storage_max_bytes: Optional[int] = Field(default=None, env="STORAGE_MAX_BYTES")
    reports_storage_key: str = Field(default="local_reports", env="REPORTS_STORAGE_KEY")
    users_storage_key: str = Field(default="local_users", env="USERS_STORAGE_KEY")
    export_dir: str = Field(default=".", env="EXPORT_DIR")

    # Remote store (Supabase) configuration
    use_remote_store: bool = Field(default=True, env="USE_REMOTE_STORE")
    supabase_url: str = Field(default="", env="SUPABASE_URL")
    supabase_key: str = Field(default="", env="SUPABASE_KEY")
    supabase_users_table: str = Field(default="users", env="SUPABASE_USERS_TABLE")
    supabase_reports_table: str = Field(default="reports", env="SUPABASE_REPORTS_TABLE")

    # Users
    default_user_role: str = Field(default="مواطن", env="DEFAULT_USER_ROLE")

    # Application configuration
    debug: bool = Field(default=False, env="DEBUG")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "allow"
    }

    @property
    def remote_configured(self) -> bool:
        """Check if remote store credentials are present."""
        return bool(self.supabase_url and self.supabase_key)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug

# Global configuration instance
config = Config()

def get_config() -> Config:
    """Get the global configuration instance."""
    return config

def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the storage layer."""
    level_name = (level or config.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
