"""Caller identity issued and verified by an AuthProvider."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


class Identity(BaseModel):
    """Authenticated caller."""

    id: str
    email: Optional[str] = None
    role: Role

    class Config:
        """Pydantic model configuration."""

        use_enum_values = True
        json_schema_extra = {
            "example": {"id": "t1", "email": "teacher@example.com", "role": "teacher"}
        }
