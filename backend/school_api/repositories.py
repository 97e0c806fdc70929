"""Repository classes encapsulating database operations.

Each repository is bound to one table and executes `QueryPlan`s against
it: the plan's sort field is resolved against the table's sortable
columns and its include graph becomes `selectinload` options. Repositories
return SQLModel objects and commit/refresh where appropriate; translating
database failures into API errors is left to the services.
"""

from typing import List, Optional, Sequence
from sqlmodel import Session, select
from sqlalchemy import func
from sqlalchemy.orm import RelationshipProperty, selectinload
from . import models
from .errors import ValidationError
from .utils.query_plan import IncludeSpec, QueryPlan, SortOrder


def _normalize_column_name(name: str) -> str:
    return name.replace('_', '').lower()


def loader_options(model, includes: Sequence[IncludeSpec]) -> list:
    """Translate an include graph into nested `selectinload` options.

    Raises `ValidationError` when a relation is not defined on `model`.
    """
    options = []
    for inc in includes:
        attr = getattr(model, inc.relation, None)
        if not isinstance(getattr(attr, 'property', None), RelationshipProperty):
            raise ValidationError(f"unknown relation '{inc.relation}' for {model.__name__}")
        loader = selectinload(attr)
        if inc.nested:
            loader = loader.options(*loader_options(attr.property.mapper.class_, inc.nested))
        options.append(loader)
    return options


class EntityRepository:
    """CRUD operations for a single table.

    Subclasses set `model` and, optionally, `sortable`: the column names a
    list request may order by.
    """
    model = None
    sortable = ('id', 'name', 'created_at', 'updated_at')

    def __init__(self, session: Session):
        self.session = session

    def sort_column(self, sort_field: str):
        """Return the column matching `sort_field`.

        Matching ignores case and underscores so `Name`, `CreatedAt` and
        `created_at` all resolve. Unknown fields raise `ValidationError`.
        """
        wanted = _normalize_column_name(sort_field)
        for name in self.sortable:
            if _normalize_column_name(name) == wanted:
                return getattr(self.model, name)
        raise ValidationError(f"cannot sort {self.model.__name__} by '{sort_field}'")

    def create(self, entity):
        """Persist a new entity and return the managed instance."""
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        return entity

    def count(self) -> int:
        """Return the total number of rows in the table."""
        stmt = select(func.count()).select_from(self.model)
        return self.session.exec(stmt).one()

    def list(self, plan: QueryPlan) -> List:
        """Return one page of entities ordered as `plan` requests.

        Rows with equal sort keys are ordered by primary key so pages do
        not overlap.
        """
        column = self.sort_column(plan.sort_field)
        order = column.desc() if plan.sort_order is SortOrder.DESC else column.asc()
        stmt = (
            select(self.model)
            .options(*loader_options(self.model, plan.includes))
            .order_by(order, self.model.id.asc())
            .offset(plan.offset)
            .limit(plan.limit)
        )
        return self.session.exec(stmt).all()

    def get(self, entity_id: int, includes: Sequence[IncludeSpec] = ()) -> Optional[object]:
        """Fetch an entity by primary key with `includes` eager-loaded, or `None`."""
        stmt = (
            select(self.model)
            .options(*loader_options(self.model, includes))
            .where(self.model.id == entity_id)
        )
        return self.session.exec(stmt).first()

    def update(self, entity, changes: dict):
        """Apply `changes` to a managed entity and bump `updated_at`."""
        for key, value in changes.items():
            setattr(entity, key, value)
        entity.updated_at = models.utcnow()
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        return entity

    def delete(self, entity) -> None:
        """Delete a managed entity."""
        self.session.delete(entity)
        self.session.commit()


class StudentRepository(EntityRepository):
    """CRUD operations for `Student` records."""
    model = models.Student


class TeacherRepository(EntityRepository):
    """CRUD operations for `Teacher` records."""
    model = models.Teacher


class CourseRepository(EntityRepository):
    """CRUD operations for `Course` records and their enrollments."""
    model = models.Course

    def enroll(self, course: models.Course, student: models.Student) -> models.Course:
        """Add `student` to `course`; enrolling twice is a no-op."""
        if student not in course.students:
            course.students.append(student)
            self.session.add(course)
            self.session.commit()
            self.session.refresh(course)
        return course

    def unenroll(self, course: models.Course, student: models.Student) -> models.Course:
        """Remove `student` from `course` if enrolled."""
        if student in course.students:
            course.students.remove(student)
            self.session.add(course)
            self.session.commit()
            self.session.refresh(course)
        return course
