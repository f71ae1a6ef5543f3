#!/usr/bin/env python3
"""
Civic Reports Storage

Persistence for civic reports and the users who submit them.
"""

from .storage import (
    FileStorage, MemoryStorage, ErrorKind, StoreResult,
    ReportsStorage, UsersStorage, init_storage, get_reports_storage, get_users_storage
)
from .remote import RemoteStoreClient, SupabaseStoreClient

__version__ = "1.0.0"

__all__ = [
    'FileStorage', 'MemoryStorage', 'ErrorKind', 'StoreResult',
    'ReportsStorage', 'UsersStorage', 'init_storage', 'get_reports_storage', 'get_users_storage',
    'RemoteStoreClient', 'SupabaseStoreClient'
]
