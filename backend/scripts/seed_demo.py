"""CLI script to fill the backend DB with a small demo school.
Usage: python scripts/seed_demo.py [--students N]
"""
import sys
import argparse
import pathlib
# Ensure `backend/` is on sys.path so `school_api` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from school_api.database import engine, create_db_and_tables
from school_api import services
from school_api.schemas import CourseIn, StudentIn, TeacherIn

TEACHERS = [('Ada Lovelace', 'Mathematics'), ('Alan Turing', 'Computer Science')]
COURSES = [('Algebra', 0), ('Calculus', 0), ('Algorithms', 1)]


def main(students: int = 6) -> dict:
    """Create two teachers, three courses and `students` enrolled students.

    Each student is enrolled in one course, round-robin. Returns the
    number of records created per entity.
    """
    create_db_and_tables()
    with Session(engine) as session:
        teacher_svc = services.TeacherService(session)
        course_svc = services.CourseService(session)
        student_svc = services.StudentService(session)
        teacher_ids = [teacher_svc.create(TeacherIn(name=n, department=d))['id'] for n, d in TEACHERS]
        course_ids = [
            course_svc.create(CourseIn(name=n, teacher_id=teacher_ids[t]))['id'] for n, t in COURSES
        ]
        for i in range(students):
            s = student_svc.create(StudentIn(name=f'Student {i + 1}', email=f'student{i + 1}@demo.school'))
            course_svc.enroll(course_ids[i % len(course_ids)], s['id'])
    summary = {'teachers': len(teacher_ids), 'courses': len(course_ids), 'students': students}
    print(f"Seeded {summary['teachers']} teachers, {summary['courses']} courses, {summary['students']} students")
    return summary


if __name__ == '__main__':
    p = argparse.ArgumentParser()
    p.add_argument('--students', type=int, default=6)
    args = p.parse_args()
    main(args.students)
