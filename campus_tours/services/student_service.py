from flask import current_app
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from campus_tours import db
from campus_tours.models.student import Student
from campus_tours.services.exceptions import NotFound, ValidationError


SEARCH_LIMIT = 25


def search_students(query):
    """Case-insensitive substring search over name, email and student id."""
    query = (query or "").strip()
    if not query:
        return []

    pattern = f"%{query.lower()}%"
    return (
        Student.query.filter(
            or_(
                func.lower(Student.name).like(pattern),
                func.lower(Student.email).like(pattern),
                func.lower(Student.student_id).like(pattern),
            )
        )
        .order_by(Student.name.asc())
        .limit(SEARCH_LIMIT)
        .all()
    )


def get_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        raise NotFound("Student not found")
    return student


def upsert_student(name, email, student_id):
    """
    Create a student, or update the one that already owns ``email``.

    An existing row keeps its primary key; name and student id are
    overwritten with the incoming values (last write wins).
    """
    name = (name or "").strip()
    email = (email or "").strip()
    student_id = (student_id or "").strip()
    if not name or not email or not student_id:
        raise ValidationError("name, email, and studentId are required")

    student = Student.query.filter_by(email=email).first()
    if student is None:
        student = Student()
        student.name = name
        student.email = email
        student.student_id = student_id
        db.session.add(student)
        try:
            db.session.commit()
            return student
        except IntegrityError:
            # Another request inserted the same email first; fall through
            # and update that row instead.
            db.session.rollback()
            student = Student.query.filter_by(email=email).first()
            if student is None:
                raise

    if student.name != name or student.student_id != student_id:
        current_app.logger.info(
            f"[students] Overwriting identity for {email}: "
            f"name {student.name!r} -> {name!r}, student id {student.student_id!r} -> {student_id!r}"
        )
    student.name = name
    student.student_id = student_id
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return student
