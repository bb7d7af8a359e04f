"""Snapshot entities: one student's attention and state at a point in time."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .class_session import utc_now


class StudentState(str, Enum):
    """Discrete emotional state reported by a student client."""

    ATTENTIVE = "attentive"
    NEUTRAL = "neutral"
    BORED = "bored"
    CONFUSED = "confused"


class Snapshot(BaseModel):
    """A received snapshot, stamped with the server receipt time.

    The relay and the event log each build their own instance for the same
    logical event.
    """

    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    student_id: str = Field(min_length=1)
    session_id: Optional[str] = None
    client_timestamp: Optional[datetime] = None
    attention: int = Field(ge=0, le=100)
    state: StudentState
    received_at: datetime = Field(default_factory=utc_now)


class SnapshotPayload(BaseModel):
    """Inbound snapshot shape shared by the live channel and the durable append.

    ``timestamp`` is the optional client-reported time; epoch milliseconds as
    sent by browser clients are accepted.
    """

    model_config = ConfigDict(
        use_enum_values=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    student_id: str = Field(min_length=1)
    session_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    attention: int = Field(ge=0, le=100)
    state: StudentState

    def to_snapshot(self, received_at: Optional[datetime] = None) -> Snapshot:
        return Snapshot(
            student_id=self.student_id,
            session_id=self.session_id,
            client_timestamp=self.timestamp,
            attention=self.attention,
            state=self.state,
            received_at=received_at or utc_now(),
        )
