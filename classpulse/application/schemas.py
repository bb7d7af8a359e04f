"""Request bodies for the HTTP surface."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..domain.entities import StudentState


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
    role: Optional[str] = None


class StartSessionRequest(_Request):
    course_id: str = "course"


class EndSessionRequest(_Request):
    session_id: str


class AppendSnapshotRequest(_Request):
    """Durable snapshot append.

    Also accepts the older form ``{"ts": ..., "metrics": {"attention", "state"}}``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    session_id: str
    student_id: str = Field(min_length=1)
    timestamp: Optional[datetime] = None
    attention: int = Field(ge=0, le=100)
    state: StudentState

    @model_validator(mode="before")
    @classmethod
    def _lift_metrics(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("metrics"), dict):
            data = {**data["metrics"], **{k: v for k, v in data.items() if k != "metrics"}}
        if isinstance(data, dict) and "ts" in data and "timestamp" not in data:
            data = {**data, "timestamp": data["ts"]}
        return data


class AttendanceRequest(_Request):
    session_id: str
    student_id: str = Field(min_length=1)
    status: Optional[str] = None
    timestamp: Optional[datetime] = None
