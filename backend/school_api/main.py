"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the school records API.
Controllers are intentionally thin: they turn query parameters into a
query plan, delegate to services and return JSON. Errors raised by the
services are rendered by the exception handlers registered below.

Endpoints implemented (for each of students, teachers, courses):
- POST /{entity}
- GET /{entity}?page=&limit=&sortby=&populate=
- GET /{entity}/{id}?populate=
- PUT /{entity}/{id}
- DELETE /{entity}/{id}
plus POST/DELETE /courses/{id}/students/{student_id} and GET /health.
"""

from fastapi import FastAPI, Depends, Query, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from typing import Optional
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services
from .config import settings
from .errors import NotFound, PersistenceError, ValidationError
from .relations import STUDENT_RELATIONS, TEACHER_RELATIONS, COURSE_RELATIONS
from .schemas import StudentIn, StudentUpdate, TeacherIn, TeacherUpdate, CourseIn, CourseUpdate
from .utils import query_plan

app = FastAPI(title="School Records API")
logger = logging.getLogger("school_api.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()

SORTBY_HELP = "Sort field: Name, CreatedAt (prefix with 'Desc' for descending)"


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    info = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        info["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(info, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    info["status_code"] = response.status_code
    info["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(info, ensure_ascii=True))
    return response


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={'message': exc.message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={'error': exc.message})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=500, content={'error': exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # Starlette re-raises after sending this response, so the middleware still logs it
    return JSONResponse(status_code=500, content={'error': str(exc)})


def _list_params(page, limit, sortby, populate) -> dict:
    return {'page': page, 'limit': limit, 'sortby': sortby, 'populate': populate}


# students

@app.post('/students', status_code=201, tags=['Students'], summary='Create a new student')
def create_student(payload: StudentIn, db: Session = Depends(get_session)):
    return services.StudentService(db).create(payload)


@app.get('/students', tags=['Students'], summary='Get all students')
def list_students(
    page: Optional[str] = Query(None, description="Page number (default 1)"),
    limit: Optional[str] = Query(None, description="Number of items per page (default 10)"),
    sortby: Optional[str] = Query(None, description=SORTBY_HELP),
    populate: Optional[str] = Query(None, description="Include related models (course, teacher)", examples=["course, teacher"]),
    db: Session = Depends(get_session),
):
    """List students one page at a time.

    `populate=course` adds each student's courses; adding `teacher`
    also loads the teacher of every course.
    """
    plan = query_plan.for_list(_list_params(page, limit, sortby, populate), STUDENT_RELATIONS, settings.MAX_PAGE_LIMIT, settings.DEFAULT_PAGE_LIMIT)
    return services.StudentService(db).list(plan)


@app.get('/students/{student_id}', tags=['Students'], summary='Get a student by ID')
def get_student(student_id: int, populate: Optional[str] = None, db: Session = Depends(get_session)):
    includes = query_plan.for_single({'populate': populate}, STUDENT_RELATIONS)
    return services.StudentService(db).get(student_id, includes)


@app.put('/students/{student_id}', tags=['Students'], summary='Update a student')
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_session)):
    return services.StudentService(db).update(student_id, payload)


@app.delete('/students/{student_id}', tags=['Students'], summary='Delete a student')
def delete_student(student_id: int, db: Session = Depends(get_session)):
    return services.StudentService(db).delete(student_id)


# teachers

@app.post('/teachers', status_code=201, tags=['Teachers'], summary='Create a new teacher')
def create_teacher(payload: TeacherIn, db: Session = Depends(get_session)):
    return services.TeacherService(db).create(payload)


@app.get('/teachers', tags=['Teachers'], summary='Get all teachers')
def list_teachers(
    page: Optional[str] = Query(None, description="Page number (default 1)"),
    limit: Optional[str] = Query(None, description="Number of items per page (default 10)"),
    sortby: Optional[str] = Query(None, description=SORTBY_HELP),
    populate: Optional[str] = Query(None, description="Include related models (course, student)", examples=["course, student"]),
    db: Session = Depends(get_session),
):
    """List teachers one page at a time.

    `populate=course` adds the courses each teacher gives; adding
    `student` also loads the students enrolled in those courses.
    """
    plan = query_plan.for_list(_list_params(page, limit, sortby, populate), TEACHER_RELATIONS, settings.MAX_PAGE_LIMIT, settings.DEFAULT_PAGE_LIMIT)
    return services.TeacherService(db).list(plan)


@app.get('/teachers/{teacher_id}', tags=['Teachers'], summary='Get a teacher by ID')
def get_teacher(teacher_id: int, populate: Optional[str] = None, db: Session = Depends(get_session)):
    includes = query_plan.for_single({'populate': populate}, TEACHER_RELATIONS)
    return services.TeacherService(db).get(teacher_id, includes)


@app.put('/teachers/{teacher_id}', tags=['Teachers'], summary='Update a teacher')
def update_teacher(teacher_id: int, payload: TeacherUpdate, db: Session = Depends(get_session)):
    return services.TeacherService(db).update(teacher_id, payload)


@app.delete('/teachers/{teacher_id}', tags=['Teachers'], summary='Delete a teacher')
def delete_teacher(teacher_id: int, db: Session = Depends(get_session)):
    return services.TeacherService(db).delete(teacher_id)


# courses

@app.post('/courses', status_code=201, tags=['Courses'], summary='Create a new course')
def create_course(payload: CourseIn, db: Session = Depends(get_session)):
    return services.CourseService(db).create(payload)


@app.get('/courses', tags=['Courses'], summary='Get all courses')
def list_courses(
    page: Optional[str] = Query(None, description="Page number (default 1)"),
    limit: Optional[str] = Query(None, description="Number of items per page (default 10)"),
    sortby: Optional[str] = Query(None, description=SORTBY_HELP),
    populate: Optional[str] = Query(None, description="Include related models (teacher, student)", examples=["teacher, student"]),
    db: Session = Depends(get_session),
):
    plan = query_plan.for_list(_list_params(page, limit, sortby, populate), COURSE_RELATIONS, settings.MAX_PAGE_LIMIT, settings.DEFAULT_PAGE_LIMIT)
    return services.CourseService(db).list(plan)


@app.get('/courses/{course_id}', tags=['Courses'], summary='Get a course by ID')
def get_course(course_id: int, populate: Optional[str] = None, db: Session = Depends(get_session)):
    includes = query_plan.for_single({'populate': populate}, COURSE_RELATIONS)
    return services.CourseService(db).get(course_id, includes)


@app.put('/courses/{course_id}', tags=['Courses'], summary='Update a course')
def update_course(course_id: int, payload: CourseUpdate, db: Session = Depends(get_session)):
    return services.CourseService(db).update(course_id, payload)


@app.delete('/courses/{course_id}', tags=['Courses'], summary='Delete a course')
def delete_course(course_id: int, db: Session = Depends(get_session)):
    return services.CourseService(db).delete(course_id)


@app.post('/courses/{course_id}/students/{student_id}', tags=['Courses'], summary='Enroll a student in a course')
def enroll_student(course_id: int, student_id: int, db: Session = Depends(get_session)):
    """Enroll a student (idempotent) and return the course with its students."""
    return services.CourseService(db).enroll(course_id, student_id)


@app.delete('/courses/{course_id}/students/{student_id}', tags=['Courses'], summary='Withdraw a student from a course')
def unenroll_student(course_id: int, student_id: int, db: Session = Depends(get_session)):
    return services.CourseService(db).unenroll(course_id, student_id)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
