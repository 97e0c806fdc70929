"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Students and courses are linked many-to-many through
`StudentCourseLink`; each course optionally belongs to one teacher.
"""

from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone
from typing import List


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StudentCourseLink(SQLModel, table=True):
    """Enrollment of a student in a course.

    The join columns are never emitted in API responses.
    """
    student_id: Optional[int] = Field(default=None, foreign_key='student.id', primary_key=True)
    course_id: Optional[int] = Field(default=None, foreign_key='course.id', primary_key=True)


class Student(SQLModel, table=True):
    """A student.

    Fields:
    - `name`: display name, also the default sort key
    - `email`: unique contact address
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False)
    email: str = Field(index=True, nullable=False, unique=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    courses: List['Course'] = Relationship(back_populates='students', link_model=StudentCourseLink)


class Teacher(SQLModel, table=True):
    """A teacher working in a department."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False)
    department: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    courses: List['Course'] = Relationship(back_populates='teacher')


class Course(SQLModel, table=True):
    """A course taught by at most one teacher and attended by students."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False)
    description: Optional[str] = None
    teacher_id: Optional[int] = Field(default=None, foreign_key='teacher.id')
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    teacher: Optional[Teacher] = Relationship(back_populates='courses')
    students: List[Student] = Relationship(back_populates='courses', link_model=StudentCourseLink)
