#!/usr/bin/env python3
"""
Supabase Remote Store

Implements the remote store interface on top of the Supabase Python client.
Blocking client calls run in a worker thread so the callers stay async.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from supabase import Client, create_client
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..utils.config import get_config
from .client import Record, RemoteStoreClient

logger = logging.getLogger(__name__)

class SupabaseStoreClient(RemoteStoreClient):
    """Remote users store backed by Supabase tables."""

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None,
                 users_table: Optional[str] = None, reports_table: Optional[str] = None):
        config = get_config()
        self.url = url if url is not None else config.supabase_url
        self.key = key if key is not None else config.supabase_key
        self.users_table = users_table or config.supabase_users_table
        self.reports_table = reports_table or config.supabase_reports_table
        self.client: Optional[Client] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    def _get_client(self) -> Client:
        """Create the Supabase client on first use."""
        if self.client is None:
            if not self.is_configured:
                raise RuntimeError("Supabase URL and key are not configured")
            self.client = create_client(self.url, self.key)
            logger.info("Supabase client initialized")
        return self.client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True
    )
    def _execute(self, query) -> List[Record]:
        """Execute a query builder with retry on transport errors."""
        response = query.execute()
        data = response.data
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    async def _run(self, query) -> List[Record]:
        return await asyncio.to_thread(self._execute, query)

    async def get_all_with_counts(self) -> Tuple[List[Record], Optional[Exception]]:
        try:
            client = self._get_client()
            users = await self._run(client.table(self.users_table).select('*'))
        except Exception as e:
            logger.error(f"Error fetching users: {e}")
            return [], e

        try:
            reports = await self._run(client.table(self.reports_table).select('email'))
        except Exception as e:
            logger.error(f"Error fetching reports for count: {e}")
            return users, e

        counts: Dict[Any, int] = {}
        for report in reports:
            email = report.get('email')
            counts[email] = counts.get(email, 0) + 1

        users_with_counts = [
            {**user, 'reportCount': counts.get(user.get('email'), 0)}
            for user in users
        ]
        return users_with_counts, None

    async def get_by_id(self, user_id: Any) -> Tuple[Optional[Record], Optional[Exception]]:
        try:
            query = self._get_client().table(self.users_table).select('*').eq('id', user_id).limit(1)
            rows = await self._run(query)
            return (rows[0] if rows else None), None
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            return None, e

    async def insert(self, fields: Record) -> Tuple[Optional[Record], Optional[Exception]]:
        try:
            rows = await self._run(self._get_client().table(self.users_table).insert([fields]))
            return (rows[0] if rows else None), None
        except Exception as e:
            logger.error(f"Error saving user: {e}")
            return None, e

    async def update(self, user_id: Any, fields: Record) -> Tuple[Optional[Record], Optional[Exception]]:
        try:
            query = self._get_client().table(self.users_table).update(fields).eq('id', user_id)
            rows = await self._run(query)
            return (rows[0] if rows else None), None
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {e}")
            return None, e

    async def delete(self, user_id: Any) -> Optional[Exception]:
        try:
            await self._run(self._get_client().table(self.users_table).delete().eq('id', user_id))
            return None
        except Exception as e:
            logger.error(f"Error deleting user {user_id}: {e}")
            return e
