"""Tests for the DynamoDB datastore."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from classpulse.domain.entities import ClassSession, Snapshot
from classpulse.infrastructure.dynamodb_datastore import DynamoDBDatastore


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table."""
    return AsyncMock()


@pytest.fixture
def mock_dynamodb_resource(mock_dynamodb_table):
    """Create a mock DynamoDB resource."""
    mock_resource = MagicMock()
    mock_resource.Table = AsyncMock(return_value=mock_dynamodb_table)
    return mock_resource


@pytest.fixture
def mock_aioboto3_session(mock_dynamodb_resource):
    """Create a mock aioboto3 session."""
    with patch("classpulse.infrastructure.dynamodb_datastore.aioboto3.Session") as mock_session_class:
        mock_session_instance = MagicMock()
        mock_session_class.return_value = mock_session_instance

        # Setup async context manager for resource
        mock_session_instance.resource.return_value.__aenter__ = AsyncMock(return_value=mock_dynamodb_resource)
        mock_session_instance.resource.return_value.__aexit__ = AsyncMock(return_value=None)

        yield mock_session_instance


@pytest.fixture
def datastore(mock_aioboto3_session):
    return DynamoDBDatastore(
        sessions_table="test-sessions",
        snapshots_table="test-snapshots",
        region_name="us-east-1",
    )


@pytest.fixture
def open_session():
    return ClassSession(
        id="sess_1",
        course_id="math",
        owner_id="t1",
        owner_email="teacher@example.com",
        started_at=datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc),
    )


class TestDynamoDBDatastore:
    """Test cases for DynamoDBDatastore."""

    @pytest.mark.asyncio
    async def test_save_open_session(self, datastore, mock_dynamodb_resource, mock_dynamodb_table, open_session):
        await datastore.save_session(open_session)

        mock_dynamodb_resource.Table.assert_awaited_once_with("test-sessions")
        mock_dynamodb_table.put_item.assert_awaited_once_with(Item={
            "id": "sess_1",
            "course_id": "math",
            "owner_id": "t1",
            "owner_email": "teacher@example.com",
            "started_at": "2026-10-19T09:00:00+00:00",
            "status": "open",
        })

    @pytest.mark.asyncio
    async def test_save_closed_session(self, datastore, mock_dynamodb_table, open_session):
        closed = open_session.closed_at(datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc))

        await datastore.save_session(closed)

        item = mock_dynamodb_table.put_item.await_args.kwargs["Item"]
        assert item["status"] == "closed"
        assert item["ended_at"] == "2026-10-19T10:00:00+00:00"

    @pytest.mark.asyncio
    async def test_append_snapshot(self, datastore, mock_dynamodb_resource, mock_dynamodb_table):
        snapshot = Snapshot(
            student_id="s1",
            session_id="sess_1",
            attention=80,
            state="attentive",
            received_at=datetime(2026, 10, 19, 9, 5, tzinfo=timezone.utc),
        )

        await datastore.append_snapshot(snapshot, 3)

        mock_dynamodb_resource.Table.assert_awaited_once_with("test-snapshots")
        mock_dynamodb_table.put_item.assert_awaited_once_with(
            Item={
                "session_id": "sess_1",
                "seq": 3,
                "student_id": "s1",
                "attention": 80,
                "state": "attentive",
                "received_at": "2026-10-19T09:05:00+00:00",
            },
            ConditionExpression="attribute_not_exists(seq)",
        )

    @pytest.mark.asyncio
    async def test_put_failure_propagates(self, datastore, mock_dynamodb_table, open_session):
        mock_dynamodb_table.put_item.side_effect = Exception("DynamoDB error")

        with pytest.raises(Exception, match="DynamoDB error"):
            await datastore.save_session(open_session)
