#!/usr/bin/env python3
"""
Remote Store Module

Async remote CRUD for users, with a Supabase implementation.
"""

from .client import RemoteStoreClient
from .supabase_client import SupabaseStoreClient

__all__ = ['RemoteStoreClient', 'SupabaseStoreClient']
