"""Attendance entities."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AttendanceRecord(BaseModel):
    """Presence of one student in one session."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    student_id: str
    status: str = "present"
    first_seen_at: datetime
    last_seen_at: datetime
