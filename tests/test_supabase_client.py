#!/usr/bin/env python3
"""
Unit tests for the Supabase remote store client
"""

import pytest
import httpx
from unittest.mock import MagicMock, Mock, patch
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from civic_reports.remote.supabase_client import SupabaseStoreClient

def make_response(data):
    response = Mock()
    response.data = data
    return response

class TestSupabaseClientConfiguration:
    """Test cases for client configuration."""

    def test_not_configured_without_credentials(self):
        client = SupabaseStoreClient(url="", key="")
        assert client.is_configured is False

    def test_configured_with_credentials(self):
        client = SupabaseStoreClient(url="https://test.supabase.co", key="test-key")
        assert client.is_configured is True
        assert client.users_table == "users"
        assert client.reports_table == "reports"

    def test_client_created_lazily_once(self):
        with patch("civic_reports.remote.supabase_client.create_client") as mock_create:
            client = SupabaseStoreClient(url="https://test.supabase.co", key="test-key")
            mock_create.assert_not_called()

            client._get_client()
            client._get_client()

            mock_create.assert_called_once_with("https://test.supabase.co", "test-key")

    @pytest.mark.asyncio
    async def test_unconfigured_calls_return_errors(self):
        """Test that an unconfigured client reports errors instead of raising."""
        with patch("civic_reports.remote.supabase_client.create_client") as mock_create:
            client = SupabaseStoreClient(url="", key="")

            users, error = await client.get_all_with_counts()
            delete_error = await client.delete(1)

            assert users == []
            assert isinstance(error, RuntimeError)
            assert isinstance(delete_error, RuntimeError)
            mock_create.assert_not_called()

class TestSupabaseClientOperations:
    """Test cases for CRUD operations against a mocked Supabase client."""

    @pytest.fixture
    def tables(self):
        return {"users": MagicMock(), "reports": MagicMock()}

    @pytest.fixture
    def client(self, tables):
        client = SupabaseStoreClient(url="https://test.supabase.co", key="test-key")
        client.client = MagicMock()
        client.client.table.side_effect = lambda name: tables[name]
        return client

    @pytest.mark.asyncio
    async def test_get_all_with_counts(self, client, tables):
        """Test that report counts are derived by email."""
        tables["users"].select.return_value.execute.return_value = make_response([
            {'id': 1, 'email': 'a@example.com'},
            {'id': 2, 'email': 'b@example.com'},
        ])
        tables["reports"].select.return_value.execute.return_value = make_response([
            {'email': 'a@example.com'}, {'email': 'a@example.com'}, {'email': 'c@example.com'},
        ])

        users, error = await client.get_all_with_counts()

        assert error is None
        assert users == [
            {'id': 1, 'email': 'a@example.com', 'reportCount': 2},
            {'id': 2, 'email': 'b@example.com', 'reportCount': 0},
        ]
        tables["reports"].select.assert_called_once_with('email')

    @pytest.mark.asyncio
    async def test_get_all_with_counts_reports_error(self, client, tables):
        """Test that a reports failure returns users without counts and the error."""
        tables["users"].select.return_value.execute.return_value = make_response([{'id': 1}])
        tables["reports"].select.return_value.execute.side_effect = RuntimeError("denied")

        users, error = await client.get_all_with_counts()

        assert users == [{'id': 1}]
        assert isinstance(error, RuntimeError)

    @pytest.mark.asyncio
    async def test_get_by_id(self, client, tables):
        query = tables["users"].select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = make_response([{'id': 7, 'name': 'Sara'}])

        user, error = await client.get_by_id(7)

        assert error is None
        assert user == {'id': 7, 'name': 'Sara'}
        tables["users"].select.return_value.eq.assert_called_once_with('id', 7)

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, client, tables):
        query = tables["users"].select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = make_response([])

        user, error = await client.get_by_id(7)

        assert user is None
        assert error is None

    @pytest.mark.asyncio
    async def test_insert(self, client, tables):
        tables["users"].insert.return_value.execute.return_value = make_response([{'id': 9, 'name': 'Sara'}])

        user, error = await client.insert({'name': 'Sara'})

        assert error is None
        assert user == {'id': 9, 'name': 'Sara'}
        tables["users"].insert.assert_called_once_with([{'name': 'Sara'}])

    @pytest.mark.asyncio
    async def test_update(self, client, tables):
        query = tables["users"].update.return_value.eq.return_value
        query.execute.return_value = make_response([{'id': 9, 'name': 'New'}])

        user, error = await client.update(9, {'name': 'New'})

        assert error is None
        assert user == {'id': 9, 'name': 'New'}
        tables["users"].update.assert_called_once_with({'name': 'New'})

    @pytest.mark.asyncio
    async def test_delete(self, client, tables):
        tables["users"].delete.return_value.eq.return_value.execute.return_value = make_response([])

        assert await client.delete(9) is None
        tables["users"].delete.return_value.eq.assert_called_once_with('id', 9)

    @pytest.mark.asyncio
    async def test_delete_error(self, client, tables):
        tables["users"].delete.return_value.eq.return_value.execute.side_effect = RuntimeError("denied")

        error = await client.delete(9)

        assert isinstance(error, RuntimeError)

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self, client, tables):
        """Test that transient transport failures are retried."""
        query = tables["users"].insert.return_value
        query.execute.side_effect = [
            httpx.ConnectError("connection reset"),
            make_response([{'id': 1}])
        ]

        with patch("tenacity.nap.time.sleep"):
            user, error = await client.insert({'name': 'Sara'})

        assert error is None
        assert user == {'id': 1}
        assert query.execute.call_count == 2

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self, client, tables):
        query = tables["users"].insert.return_value
        query.execute.side_effect = RuntimeError("duplicate key")

        user, error = await client.insert({'name': 'Sara'})

        assert user is None
        assert isinstance(error, RuntimeError)
        assert query.execute.call_count == 1
