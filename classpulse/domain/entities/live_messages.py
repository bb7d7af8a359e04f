"""WebSocket message models for the live snapshot channel."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .snapshot import Snapshot


# ===== Client → Server Messages =====

# "ping" carries no payload. Snapshot frames are parsed as SnapshotPayload,
# which ignores the "type" key.


# ===== Server → Client Messages =====


class Pong(BaseModel):
    """Liveness probe answer, sent only to the probing client."""

    type: Literal["pong"] = "pong"


class SnapshotBroadcast(BaseModel):
    """Snapshot fanned out to every subscriber, sender included."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["snapshot"] = "snapshot"
    student_id: str
    session_id: Optional[str] = None
    attention: int
    state: str
    timestamp: Optional[datetime] = None
    server_timestamp: datetime

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotBroadcast":
        return cls(
            student_id=snapshot.student_id,
            session_id=snapshot.session_id,
            attention=snapshot.attention,
            state=snapshot.state,
            timestamp=snapshot.client_timestamp,
            server_timestamp=snapshot.received_at,
        )
