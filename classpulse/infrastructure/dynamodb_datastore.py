"""DynamoDB implementation of the Datastore protocol."""

from typing import Any, Dict

import aioboto3

from ..domain.entities.class_session import ClassSession
from ..domain.entities.snapshot import Snapshot
from ..domain.interfaces.datastore import Datastore


class DynamoDBDatastore(Datastore):
    """Mirrors sessions and snapshots into two DynamoDB tables.

    Sessions are keyed by ``id``. Snapshots use ``session_id`` as partition key
    and the receipt ``seq`` as sort key, so a query returns them in log order.
    """

    def __init__(
        self,
        sessions_table: str,
        snapshots_table: str,
        region_name: str = "us-east-1",
    ):
        """Initialize the DynamoDB datastore.

        Args:
            sessions_table: Name of the sessions table.
            snapshots_table: Name of the snapshots table.
            region_name: AWS region name (default: us-east-1).
        """
        self.sessions_table = sessions_table
        self.snapshots_table = snapshots_table
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def save_session(self, session: ClassSession) -> None:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.sessions_table)
            await table.put_item(Item=self._session_to_item(session))

    async def append_snapshot(self, snapshot: Snapshot, sequence: int) -> None:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.snapshots_table)
            await table.put_item(
                Item=self._snapshot_to_item(snapshot, sequence),
                ConditionExpression="attribute_not_exists(seq)",
            )

    def _session_to_item(self, session: ClassSession) -> Dict[str, Any]:
        item = {
            "id": session.id,
            "course_id": session.course_id,
            "owner_id": session.owner_id,
            "started_at": session.started_at.isoformat(),
            "status": session.status.value,
        }
        if session.owner_email:
            item["owner_email"] = session.owner_email
        if session.ended_at is not None:
            item["ended_at"] = session.ended_at.isoformat()
        return item

    def _snapshot_to_item(self, snapshot: Snapshot, sequence: int) -> Dict[str, Any]:
        item = {
            "session_id": snapshot.session_id,
            "seq": sequence,
            "student_id": snapshot.student_id,
            "attention": snapshot.attention,
            "state": snapshot.state,
            "received_at": snapshot.received_at.isoformat(),
        }
        if snapshot.client_timestamp is not None:
            item["client_timestamp"] = snapshot.client_timestamp.isoformat()
        return item
