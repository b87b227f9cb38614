"""Registration ledger: seat claims, check-in and removal.

Every counter change on ``tours`` is a single conditional UPDATE issued in
the same transaction as the registration row it accounts for, with the tour
row locked first on dialects that support ``FOR UPDATE``.
"""

import uuid

from flask import current_app
from sqlalchemy import func, not_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from campus_tours import db
from campus_tours.models.registration import Registration
from campus_tours.models.student import Student
from campus_tours.models.tour import Tour
from campus_tours.services import tour_service
from campus_tours.services.exceptions import (
    AlreadyRegistered,
    InsufficientCapacity,
    NotFound,
    TourBookingError,
    TourCanceled,
    TourLimitReached,
    TourPaused,
    ValidationError,
)
from campus_tours.services.settings_manager import SettingsManager
from campus_tours.services.student_service import upsert_student
from campus_tours.utils.db_utils import (
    floored_decrement,
    get_for_update,
    lock_for_write,
    supports_row_locks,
)


CODE_LENGTH = 5
CODE_ATTEMPTS = 5
WALK_IN_EMAIL_DOMAIN = "walkin.local"


def generate_code():
    """Short upper-case confirmation code, e.g. ``3FA9C``."""
    return uuid.uuid4().hex[:CODE_LENGTH].upper()


def _fresh_code():
    code = generate_code()
    for _ in range(CODE_ATTEMPTS - 1):
        taken = (
            db.session.query(Registration.id)
            .filter(func.upper(Registration.code) == code)
            .first()
        )
        if not taken:
            break
        code = generate_code()
    return code


def _lock_bookable_tour(tour_id):
    tour = get_for_update(Tour, tour_id)
    if not tour:
        raise NotFound("Tour not found")
    if tour.canceled:
        raise TourCanceled()
    if tour.paused:
        raise TourPaused()
    return tour


def _claim_seat(tour_id, student_id):
    """Take one seat and insert the registration that owns it."""
    result = db.session.execute(
        update(Tour)
        .where(
            Tour.id == tour_id,
            Tour.registered < Tour.capacity,
            not_(Tour.paused),
            not_(Tour.canceled),
        )
        .values(registered=Tour.registered + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientCapacity()

    registration = Registration()
    registration.student_id = student_id
    registration.tour_id = tour_id
    registration.code = _fresh_code()
    registration.checked_in = False
    db.session.add(registration)
    db.session.flush()
    return registration


def _log_rejection(action, err, **context):
    details = " ".join(f"{k}={v}" for k, v in context.items())
    current_app.logger.warning(f"[registrations] {action} rejected ({err.code}): {details}")


def create_registration(tour_id, student_id=None, student_data=None):
    """
    Register a student for a tour.

    Either ``student_id`` of an existing student or ``student_data``
    (``name``, ``email``, ``student_id``) must be given; the latter is
    upserted by email first.

    Returns:
        (registration, tour) with the tour's derived status attached

    Raises:
        ValidationError, NotFound, TourCanceled, TourPaused,
        AlreadyRegistered, TourLimitReached, InsufficientCapacity
    """
    if not tour_id:
        raise ValidationError("tourId is required")

    if not student_id:
        if not student_data:
            raise ValidationError("studentId or student object is required")
        student = upsert_student(
            student_data.get("name"),
            student_data.get("email"),
            student_data.get("student_id"),
        )
        student_id = student.id

    settings = SettingsManager.get()

    try:
        _lock_bookable_tour(tour_id)

        # Lock the student before counting: two tours booked at once must
        # not both pass the per-student limit.
        if not lock_for_write(Student, student_id, Student.updated_at):
            raise NotFound("Student not found")

        existing = (
            db.session.query(Registration.id)
            .filter_by(student_id=student_id, tour_id=tour_id)
            .first()
        )
        if existing:
            raise AlreadyRegistered()

        held = (
            db.session.query(func.count(func.distinct(Registration.tour_id)))
            .filter(Registration.student_id == student_id)
            .scalar()
            or 0
        )
        if held >= settings.max_tours_per_student:
            raise TourLimitReached()

        registration = _claim_seat(tour_id, student_id)
        registration_id = registration.id
        db.session.commit()
    except TourBookingError as e:
        db.session.rollback()
        _log_rejection("Registration", e, tour=tour_id, student=student_id)
        raise
    except IntegrityError:
        # unique_student_tour tripped by a concurrent duplicate
        db.session.rollback()
        err = AlreadyRegistered()
        _log_rejection("Registration", err, tour=tour_id, student=student_id)
        raise err
    except Exception:
        db.session.rollback()
        raise

    registration = db.session.get(Registration, registration_id)
    current_app.logger.info(
        f"[registrations] Student {student_id} registered for tour {tour_id} (code {registration.code})"
    )
    return registration, tour_service.get_tour(tour_id)


def create_walk_in_registration(tour_id, name):
    """
    Register someone with no directory entry.

    A placeholder student is created with a synthetic
    ``<uuid>@walkin.local`` email and its own id as student id.

    Returns:
        (registration, tour, student)
    """
    name = (name or "").strip()
    if not tour_id:
        raise ValidationError("tourId is required")
    if not name:
        raise ValidationError("name is required")

    try:
        tour = _lock_bookable_tour(tour_id)
        if tour.capacity - tour.registered < 1:
            raise InsufficientCapacity()

        student_pk = str(uuid.uuid4())
        student = Student()
        student.id = student_pk
        student.name = name
        student.email = f"{uuid.uuid4()}@{WALK_IN_EMAIL_DOMAIN}"
        student.student_id = student_pk
        db.session.add(student)
        db.session.flush()

        registration = _claim_seat(tour_id, student_pk)
        registration_id = registration.id
        db.session.commit()
    except TourBookingError as e:
        db.session.rollback()
        _log_rejection("Walk-in", e, tour=tour_id)
        raise
    except Exception:
        db.session.rollback()
        raise

    registration = db.session.get(Registration, registration_id)
    current_app.logger.info(
        f"[registrations] Walk-in {name!r} registered for tour {tour_id} (code {registration.code})"
    )
    return registration, tour_service.get_tour(tour_id), registration.student


def list_registrations(tour_id=None, student_id=None):
    """Registrations newest first, with student and tour loaded."""
    query = Registration.query.options(
        joinedload(Registration.student),
        joinedload(Registration.tour),
    )
    if tour_id:
        query = query.filter(Registration.tour_id == tour_id)
    if student_id:
        query = query.filter(Registration.student_id == student_id)

    registrations = query.order_by(
        Registration.created_at.desc(), Registration.id.asc()
    ).all()

    settings = SettingsManager.get()
    tour_service.annotate({r.tour.id: r.tour for r in registrations}.values(), settings)
    return registrations


def _find_for_update(identifier):
    """Match by primary id first, then by confirmation code ignoring case."""
    by_id = db.select(Registration).where(Registration.id == identifier)
    by_code = (
        db.select(Registration)
        .where(func.lower(Registration.code) == identifier.lower())
        .order_by(Registration.created_at.desc())
        .limit(1)
    )
    for stmt in (by_id, by_code):
        if supports_row_locks():
            stmt = stmt.with_for_update()
        registration = db.session.execute(
            stmt.execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if registration:
            return registration
    return None


def toggle_check_in(identifier):
    """
    Flip the checked-in flag of a registration found by id or code.

    An empty identifier is reported as not found without touching the DB.

    Returns:
        the updated Registration
    """
    normalized = (identifier or "").strip()
    if not normalized:
        raise NotFound("Registration not found")

    try:
        registration = _find_for_update(normalized)
        if not registration:
            raise NotFound("Registration not found")

        checked_in = not registration.checked_in
        registration.checked_in = checked_in
        db.session.execute(
            update(Tour)
            .where(Tour.id == registration.tour_id)
            .values(
                checked_in=(Tour.checked_in + 1)
                if checked_in
                else floored_decrement(Tour.checked_in)
            )
            .execution_options(synchronize_session=False)
        )
        registration_id = registration.id
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    registration = db.session.get(Registration, registration_id)
    current_app.logger.info(
        f"[registrations] Registration {registration_id} checked_in={registration.checked_in}"
    )
    return registration


def remove_registration(registration_id):
    """
    Delete a registration and release its seat.

    Returns:
        dict snapshot of the removed registration (snake_case attributes)
    """
    try:
        registration = get_for_update(Registration, registration_id)
        if not registration:
            raise NotFound("Registration not found")

        removed = {
            "id": registration.id,
            "student_id": registration.student_id,
            "tour_id": registration.tour_id,
            "code": registration.code,
            "checked_in": registration.checked_in,
            "created_at": registration.created_at,
        }

        values = {"registered": floored_decrement(Tour.registered)}
        if registration.checked_in:
            values["checked_in"] = floored_decrement(Tour.checked_in)

        db.session.delete(registration)
        db.session.flush()
        db.session.execute(
            update(Tour)
            .where(Tour.id == removed["tour_id"])
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        f"[registrations] Removed registration {removed['id']} from tour {removed['tour_id']}"
    )
    return removed
