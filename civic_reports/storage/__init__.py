#!/usr/bin/env python3
"""
Storage Module

Local report storage and users storage with remote/local backend selection.
"""

from typing import Optional

from ..utils.config import Config, get_config
from .medium import KeyValueStorage, FileStorage, MemoryStorage, StorageError, StorageQuotaExceeded
from .results import ErrorKind, StoreResult
from .reports_storage import ReportsStorage, ReportStats, ReportStatus, ReportPriority
from .users_storage import (
    UsersStorage, UserStats, UserRepository, LocalUserRepository, RemoteUserRepository
)

# Global storage instances
_reports_storage: Optional[ReportsStorage] = None
_users_storage: Optional[UsersStorage] = None

def init_storage(config: Optional[Config] = None,
                 medium: Optional[KeyValueStorage] = None) -> UsersStorage:
    """Build the report and user storages from configuration."""
    global _reports_storage, _users_storage
    from ..remote.supabase_client import SupabaseStoreClient

    config = config or get_config()
    if medium is None:
        medium = FileStorage(config.storage_dir, config.storage_max_bytes)

    _reports_storage = ReportsStorage(medium, config.reports_storage_key, config.export_dir)
    remote = SupabaseStoreClient(
        url=config.supabase_url,
        key=config.supabase_key,
        users_table=config.supabase_users_table,
        reports_table=config.supabase_reports_table
    )
    _users_storage = UsersStorage(
        medium,
        remote=remote,
        reports=_reports_storage,
        use_remote=config.use_remote_store,
        storage_key=config.users_storage_key,
        default_role=config.default_user_role
    )
    return _users_storage

def get_reports_storage() -> ReportsStorage:
    """Get the global reports storage instance."""
    if _reports_storage is None:
        init_storage()
    return _reports_storage

def get_users_storage() -> UsersStorage:
    """Get the global users storage instance."""
    if _users_storage is None:
        init_storage()
    return _users_storage

__all__ = [
    'KeyValueStorage', 'FileStorage', 'MemoryStorage', 'StorageError', 'StorageQuotaExceeded',
    'ErrorKind', 'StoreResult',
    'ReportsStorage', 'ReportStats', 'ReportStatus', 'ReportPriority',
    'UsersStorage', 'UserStats', 'UserRepository', 'LocalUserRepository', 'RemoteUserRepository',
    'init_storage', 'get_reports_storage', 'get_users_storage'
]
