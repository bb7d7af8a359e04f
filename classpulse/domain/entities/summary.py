"""Derived aggregation results. Recomputed on every request, never stored."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .class_session import ClassSession


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StudentSummary(_WireModel):
    """Mean attention and state histogram for one student in one session."""

    student_id: str
    mean_attention: int
    histogram: Dict[str, int] = Field(default_factory=dict)


class SessionSummary(_WireModel):
    session: ClassSession
    summary: List[StudentSummary] = Field(default_factory=list)


class DailyReportRow(_WireModel):
    student_id: str
    mean_attention: int


class DailyReportEntry(_WireModel):
    session_id: str
    course_id: str
    owner_email: Optional[str] = Field(default=None, exclude=True)
    rows: List[DailyReportRow] = Field(default_factory=list)


class ClassAlert(_WireModel):
    """Advisory computed from the most recent snapshot of each student."""

    alert: str = ""
    students: int = 0
    counts: Dict[str, int] = Field(default_factory=dict)
