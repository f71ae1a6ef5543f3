#!/usr/bin/env python3
"""
Users Storage

Users live either in a remote store or in the local storage medium. The backend
is chosen once when the storage is built: the remote repository is used when it
is enabled and configured, otherwise the local one. Remote reads fall back to
the local collection on error; remote writes do not.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, asdict
from functools import reduce
from typing import Any, Dict, List, Optional

from ..remote.client import RemoteStoreClient
from .envelope import EnvelopeStore, utc_now_iso
from .medium import KeyValueStorage
from .reports_storage import ReportsStorage
from .results import ErrorKind, StoreResult

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "مواطن"

DEFAULT_USERS = [
    {'id': 'user_1', 'name': 'أحمد محمد', 'email': 'ahmed.mohamed@example.com'},
    {'id': 'user_2', 'name': 'فاطمة علي', 'email': 'fatima.ali@example.com'},
    {'id': 'user_3', 'name': 'محمد حسن', 'email': 'mohamed.hassan@example.com'},
]

@dataclass
class UserStats:
    """Aggregate report activity over all users."""
    total_users: int
    total_reports: int
    average_reports_per_user: str
    most_active_user: Optional[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

REMOTE_OPERATIONS = ('get_all_with_counts', 'get_by_id', 'insert', 'update', 'delete')

def _report_count(user: Dict[str, Any]) -> int:
    return user.get('reportCount') or 0

def _remote_available(remote: Optional[RemoteStoreClient]) -> bool:
    """Check the remote client is configured and exposes every operation."""
    if remote is None or not getattr(remote, 'is_configured', False):
        return False
    return all(callable(getattr(remote, name, None)) for name in REMOTE_OPERATIONS)

class UserRepository(ABC):
    """Async user persistence backend."""

    is_remote = False

    @abstractmethod
    async def load_users(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def add_user(self, user: Dict[str, Any]) -> StoreResult:
        ...

    @abstractmethod
    async def update_user(self, user_id: Any, updated_data: Dict[str, Any]) -> StoreResult:
        ...

    @abstractmethod
    async def delete_user(self, user_id: Any) -> StoreResult:
        ...

    @abstractmethod
    async def get_user_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def update_user_report_count(self, email: Optional[str] = None) -> StoreResult:
        ...

class LocalUserRepository(UserRepository):
    """Users kept in the local storage medium, oldest first."""

    def __init__(self, medium: KeyValueStorage, storage_key: str = "local_users",
                 reports: Optional[ReportsStorage] = None, default_role: str = DEFAULT_ROLE):
        self.reports = reports
        self.default_role = default_role
        self._store = EnvelopeStore(medium, storage_key, "users")

    def load_users_from_local(self) -> List[Dict[str, Any]]:
        return self._store.load_collection()

    def save_users_to_local(self, users: List[Dict[str, Any]]) -> StoreResult:
        return self._store.save_collection(users)

    def seed_default_users(self) -> bool:
        """Write the placeholder users when the local collection is empty.

        Returns True only when users were written.
        """
        if self.load_users_from_local():
            return False

        join_date = utc_now_iso()
        users = [
            {**user, 'role': self.default_role, 'joinDate': join_date, 'reportCount': 0}
            for user in DEFAULT_USERS
        ]
        result = self.save_users_to_local(users)
        if result:
            logger.info(f"Seeded {len(users)} default users")
        return result.ok

    def clear_users(self) -> StoreResult:
        return self._store.clear()

    async def load_users(self) -> List[Dict[str, Any]]:
        return self.load_users_from_local()

    async def add_user(self, user: Dict[str, Any]) -> StoreResult:
        users = self.load_users_from_local()
        existing_ids = {existing.get('id') for existing in users}
        stamp = int(time.time() * 1000)
        while f"user_{stamp}" in existing_ids:
            stamp += 1

        new_user = {
            'id': f"user_{stamp}",
            **user,
            'joinDate': utc_now_iso(),
            'reportCount': 0
        }
        users.append(new_user)
        result = self.save_users_to_local(users)
        return StoreResult.success(new_user) if result else result

    async def update_user(self, user_id: Any, updated_data: Dict[str, Any]) -> StoreResult:
        return self._store.update_item(user_id, updated_data)

    async def delete_user(self, user_id: Any) -> StoreResult:
        return self._store.delete_item(user_id)

    async def get_user_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        return self._store.find_item(user_id)

    async def update_user_report_count(self, email: Optional[str] = None) -> StoreResult:
        """Recount reports per user from the local reports.

        With ``email`` only users with that email are recounted, otherwise all.
        """
        users = self.load_users_from_local()
        reports = self.reports.load_reports() if self.reports is not None else []
        counts = Counter(report.get('email') for report in reports)

        for user in users:
            if email is None or user.get('email') == email:
                user['reportCount'] = counts.get(user.get('email'), 0)

        return self.save_users_to_local(users)

class RemoteUserRepository(UserRepository):
    """Users kept in a remote store, with local reads as fallback."""

    is_remote = True

    def __init__(self, remote: RemoteStoreClient, fallback: LocalUserRepository,
                 default_role: str = DEFAULT_ROLE):
        self.remote = remote
        self.fallback = fallback
        self.default_role = default_role

    async def load_users(self) -> List[Dict[str, Any]]:
        try:
            logger.debug("Loading users from remote store")
            users, error = await self.remote.get_all_with_counts()
        except Exception as e:
            users, error = None, e

        if error is not None:
            logger.warning(f"Remote store error, falling back to local storage: {error}")
            return self.fallback.load_users_from_local()

        users = users or []
        logger.info(f"Loaded {len(users)} users from remote store")
        return users

    async def add_user(self, user: Dict[str, Any]) -> StoreResult:
        fields = {
            'name': user.get('name'),
            'email': user.get('email'),
            'role': user.get('role') or self.default_role,
            'created_at': utc_now_iso(),
            'reportCount': 0
        }
        try:
            saved_user, error = await self.remote.insert(fields)
        except Exception as e:
            saved_user, error = None, e

        if error is not None:
            logger.error(f"Error saving user to remote store: {error}")
            return StoreResult.failure(ErrorKind.REMOTE_FAILURE, str(error))

        logger.info(f"User saved to remote store: {saved_user}")
        return StoreResult.success()

    async def update_user(self, user_id: Any, updated_data: Dict[str, Any]) -> StoreResult:
        try:
            user, error = await self.remote.update(user_id, updated_data)
        except Exception as e:
            user, error = None, e

        if error is not None:
            logger.error(f"Error updating user {user_id} in remote store: {error}")
            return StoreResult.failure(ErrorKind.REMOTE_FAILURE, str(error))

        logger.info(f"User updated in remote store: {user_id}")
        return StoreResult.success(user)

    async def delete_user(self, user_id: Any) -> StoreResult:
        try:
            error = await self.remote.delete(user_id)
        except Exception as e:
            error = e

        if error is not None:
            logger.error(f"Error deleting user {user_id} from remote store: {error}")
            return StoreResult.failure(ErrorKind.REMOTE_FAILURE, str(error))

        logger.info(f"User deleted from remote store: {user_id}")
        return StoreResult.success()

    async def get_user_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        try:
            user, error = await self.remote.get_by_id(user_id)
        except Exception as e:
            user, error = None, e

        if error is not None:
            logger.error(f"Error getting user {user_id} from remote store: {error}")
            return None
        return user

    async def update_user_report_count(self, email: Optional[str] = None) -> StoreResult:
        # Remote reads derive reportCount on every load.
        logger.debug("Report counts are calculated by the remote store")
        return StoreResult.success()

class UsersStorage:
    """Storage manager for users."""

    def __init__(self, medium: KeyValueStorage, remote: Optional[RemoteStoreClient] = None,
                 reports: Optional[ReportsStorage] = None, use_remote: bool = True,
                 storage_key: str = "local_users", default_role: str = DEFAULT_ROLE):
        self.local = LocalUserRepository(medium, storage_key, reports, default_role)

        if use_remote and _remote_available(remote):
            self.repository: UserRepository = RemoteUserRepository(remote, self.local, default_role)
        else:
            self.repository = self.local
            self.local.seed_default_users()

    @property
    def is_remote(self) -> bool:
        """Check if users are kept in the remote store."""
        return self.repository.is_remote

    def load_users_from_local(self) -> List[Dict[str, Any]]:
        return self.local.load_users_from_local()

    def save_users_to_local(self, users: List[Dict[str, Any]]) -> StoreResult:
        return self.local.save_users_to_local(users)

    async def load_users(self) -> List[Dict[str, Any]]:
        return await self.repository.load_users()

    async def add_user(self, user: Dict[str, Any]) -> StoreResult:
        return await self.repository.add_user(user)

    async def update_user(self, user_id: Any, updated_data: Dict[str, Any]) -> StoreResult:
        return await self.repository.update_user(user_id, updated_data)

    async def delete_user(self, user_id: Any) -> StoreResult:
        return await self.repository.delete_user(user_id)

    async def get_user_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        return await self.repository.get_user_by_id(user_id)

    async def update_user_report_count(self, email: Optional[str] = None) -> StoreResult:
        return await self.repository.update_user_report_count(email)

    async def get_users_stats(self) -> Optional[UserStats]:
        """Total and average report counts plus the most active user.

        Ties for most active keep the first user encountered.
        """
        users = await self.load_users()
        try:
            total_reports = sum(_report_count(user) for user in users)
            average = f"{total_reports / len(users):.1f}" if users else "0.0"
            most_active = reduce(
                lambda prev, current: prev if _report_count(prev) >= _report_count(current) else current,
                users
            ) if users else None
        except (TypeError, ValueError) as e:
            logger.error(f"Error getting users statistics: {e}")
            return None

        return UserStats(
            total_users=len(users),
            total_reports=total_reports,
            average_reports_per_user=average,
            most_active_user=most_active
        )

    def clear_users(self) -> StoreResult:
        return self.local.clear_users()
