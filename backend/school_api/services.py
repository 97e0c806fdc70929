"""Business logic services used by HTTP controllers.

Services are intentionally thin: they run repository operations inside a
session passed in by the caller, turn database failures into
`PersistenceError` (rolling the session back first so nothing is left
half-written), raise `NotFound` for missing ids and serialize entities
together with whatever relations the request asked to populate.
"""

import logging
import math
from contextlib import contextmanager
from typing import Sequence
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from . import repositories
from .errors import NotFound, PersistenceError
from .utils.query_plan import IncludeSpec, QueryPlan

logger = logging.getLogger("school_api.services")


def serialize(entity, includes: Sequence[IncludeSpec] = ()) -> dict:
    """Return `entity` as a JSON-ready dict.

    Each include adds a key named after the relation: a list for
    collections, an object (or `None`) for single references. Nested
    includes are serialized recursively.
    """
    out = entity.model_dump(mode="json")
    for inc in includes:
        related = getattr(entity, inc.relation)
        if related is None:
            out[inc.relation] = None
        elif isinstance(related, list):
            out[inc.relation] = [serialize(r, inc.nested) for r in related]
        else:
            out[inc.relation] = serialize(related, inc.nested)
    return out


class EntityService:
    """CRUD operations for one entity type."""
    repository_class = repositories.EntityRepository
    entity_name = "entity"

    def __init__(self, session: Session):
        self.session = session
        self.repo = self.repository_class(session)

    @contextmanager
    def _persistence(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            message = str(getattr(e, "orig", None) or e)
            logger.warning("%s %s failed: %s", self.entity_name, action, message)
            raise PersistenceError(message) from e

    def _get_or_404(self, entity_id: int, includes: Sequence[IncludeSpec] = ()):
        entity = self.repo.get(entity_id, includes)
        if entity is None:
            raise NotFound()
        return entity

    def create(self, payload: BaseModel) -> dict:
        """Create a record from a validated request body."""
        with self._persistence("create"):
            entity = self.repo.create(self.repo.model(**payload.model_dump()))
            logger.info("%s created id=%s", self.entity_name, entity.id)
            return serialize(entity)

    def list(self, plan: QueryPlan) -> dict:
        """Return one page of records with pagination metadata.

        `totalPages` is the ceiling of `totalItems / limit`, so an empty
        table reports zero pages.
        """
        with self._persistence("list"):
            total = self.repo.count()
            entities = self.repo.list(plan)
            return {
                'meta': {
                    'totalItems': total,
                    'page': plan.page,
                    'totalPages': math.ceil(total / plan.limit),
                },
                'data': [serialize(e, plan.includes) for e in entities],
            }

    def get(self, entity_id: int, includes: Sequence[IncludeSpec] = ()) -> dict:
        with self._persistence("get"):
            return serialize(self._get_or_404(entity_id, includes), includes)

    def update(self, entity_id: int, payload: BaseModel) -> dict:
        """Apply only the fields present in `payload`."""
        with self._persistence("update"):
            entity = self._get_or_404(entity_id)
            entity = self.repo.update(entity, payload.model_dump(exclude_unset=True))
            return serialize(entity)

    def delete(self, entity_id: int) -> dict:
        with self._persistence("delete"):
            entity = self._get_or_404(entity_id)
            self.repo.delete(entity)
            logger.info("%s deleted id=%s", self.entity_name, entity_id)
            return {'message': 'Deleted'}


class StudentService(EntityService):
    repository_class = repositories.StudentRepository
    entity_name = "student"


class TeacherService(EntityService):
    repository_class = repositories.TeacherRepository
    entity_name = "teacher"


class CourseService(EntityService):
    """Course CRUD plus student enrollment."""
    repository_class = repositories.CourseRepository
    entity_name = "course"

    def _course_and_student(self, course_id: int, student_id: int):
        course = self._get_or_404(course_id)
        student = repositories.StudentRepository(self.session).get(student_id)
        if student is None:
            raise NotFound()
        return course, student

    def enroll(self, course_id: int, student_id: int) -> dict:
        """Enroll a student and return the course with its students."""
        with self._persistence("enroll"):
            course, student = self._course_and_student(course_id, student_id)
            course = self.repo.enroll(course, student)
            return serialize(course, (IncludeSpec('students'),))

    def unenroll(self, course_id: int, student_id: int) -> dict:
        """Withdraw a student and return the course with its remaining students."""
        with self._persistence("unenroll"):
            course, student = self._course_and_student(course_id, student_id)
            course = self.repo.unenroll(course, student)
            return serialize(course, (IncludeSpec('students'),))
