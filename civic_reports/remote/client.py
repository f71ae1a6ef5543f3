#!/usr/bin/env python3
"""
Remote store interface consumed by the users storage.

Every operation reports failures through its ``error`` slot instead of raising.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

Record = Dict[str, Any]

class RemoteStoreClient(ABC):
    """Narrow async CRUD surface over the remote users table."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the client can reach a remote store."""

    @abstractmethod
    async def get_all_with_counts(self) -> Tuple[List[Record], Optional[Exception]]:
        """All users, each with a derived ``reportCount``."""

    @abstractmethod
    async def get_by_id(self, user_id: Any) -> Tuple[Optional[Record], Optional[Exception]]:
        ...

    @abstractmethod
    async def insert(self, fields: Record) -> Tuple[Optional[Record], Optional[Exception]]:
        ...

    @abstractmethod
    async def update(self, user_id: Any, fields: Record) -> Tuple[Optional[Record], Optional[Exception]]:
        ...

    @abstractmethod
    async def delete(self, user_id: Any) -> Optional[Exception]:
        ...
