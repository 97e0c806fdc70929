"""Pydantic request schemas used by the API.

Create schemas list the required fields of each entity; update schemas
make every field optional so PUT can carry a partial record.
"""

from pydantic import BaseModel
from typing import Optional


class StudentIn(BaseModel):
    """Payload for creating a student."""
    name: str
    email: str


class StudentUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class TeacherIn(BaseModel):
    """Payload for creating a teacher."""
    name: str
    department: str


class TeacherUpdate(BaseModel):
    name: Optional[str] = None
    department: Optional[str] = None


class CourseIn(BaseModel):
    """Payload for creating a course; `teacher_id` may be left empty."""
    name: str
    description: Optional[str] = None
    teacher_id: Optional[int] = None


class CourseUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    teacher_id: Optional[int] = None
