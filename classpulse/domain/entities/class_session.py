"""Session entities for the classroom attention tracker."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    """Session status enum."""
    OPEN = "open"
    CLOSED = "closed"


class ClassSession(BaseModel):
    """A bounded teaching period.

    Instances are frozen. Closing a session produces a new instance that
    replaces the old one in the registry, so readers never see a half-updated
    record.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "sess_1760889600000",
                "courseId": "math-101",
                "ownerId": "t1",
                "ownerEmail": "teacher@example.com",
                "startedAt": "2026-10-19T09:00:00Z",
                "endedAt": None,
            }
        },
    )

    id: str
    course_id: str
    owner_id: str
    owner_email: Optional[str] = None
    started_at: datetime = Field(default_factory=utc_now)
    ended_at: Optional[datetime] = None

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.OPEN if self.ended_at is None else SessionStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def closed_at(self, when: datetime) -> "ClassSession":
        """Return a closed copy of this session."""
        return self.model_copy(update={"ended_at": when})
