"""Booking, check-in and removal against the tour counters."""
import threading

import pytest

from campus_tours import db
from campus_tours.models.registration import Registration
from campus_tours.models.student import Student
from campus_tours.models.tour import Tour
from campus_tours.services import registration_service, tour_service
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


def _assert_counters_match(tour_id, fresh, count_registrations):
    tour = fresh(Tour, tour_id)
    assert tour.registered == count_registrations(tour_id=tour_id)
    assert tour.checked_in == count_registrations(tour_id=tour_id, checked_in=True)
    assert 0 <= tour.checked_in <= tour.registered <= tour.capacity


def test_generate_code_shape():
    code = registration_service.generate_code()
    assert len(code) == 5
    assert code == code.upper()
    int(code, 16)


def test_register_existing_student(sample_data, fresh, count_registrations):
    registration, tour = registration_service.create_registration(
        sample_data['tour_id'], student_id=sample_data['student_id'])

    assert registration.tour_id == sample_data['tour_id']
    assert registration.student_id == sample_data['student_id']
    assert registration.checked_in is False
    assert len(registration.code) == 5
    assert tour.registered == 1
    assert tour.remaining == 24
    assert tour.status == 'available'
    _assert_counters_match(sample_data['tour_id'], fresh, count_registrations)


def test_register_with_student_data_upserts(settings_row, make_tour):
    tour_id = make_tour()
    registration, _ = registration_service.create_registration(
        tour_id,
        student_data={'name': 'Katherine Johnson', 'email': 'kj@campus.edu', 'student_id': 'S9'},
    )
    student = db.session.get(Student, registration.student_id)
    assert student.email == 'kj@campus.edu'


def test_register_requires_a_student(settings_row, make_tour):
    with pytest.raises(ValidationError):
        registration_service.create_registration(make_tour())


def test_duplicate_registration_rejected(sample_data, count_registrations):
    registration_service.create_registration(
        sample_data['tour_id'], student_id=sample_data['student_id'])

    with pytest.raises(AlreadyRegistered):
        registration_service.create_registration(
            sample_data['tour_id'], student_id=sample_data['student_id'])

    assert count_registrations(tour_id=sample_data['tour_id']) == 1


def test_tour_limit_enforced(settings_row, make_tour, make_student, fresh):
    student_id = make_student()
    first, second, third = make_tour(), make_tour(), make_tour()

    registration_service.create_registration(first, student_id=student_id)
    registration_service.create_registration(second, student_id=student_id)
    with pytest.raises(TourLimitReached):
        registration_service.create_registration(third, student_id=student_id)

    assert fresh(Tour, third).registered == 0


def test_tour_limit_follows_settings(settings_row, make_tour, make_student):
    SettingsManager.update({'max_tours_per_student': 1})
    student_id = make_student()
    registration_service.create_registration(make_tour(), student_id=student_id)
    with pytest.raises(TourLimitReached):
        registration_service.create_registration(make_tour(), student_id=student_id)


def test_full_tour_rejected(settings_row, make_tour, make_student, fresh, count_registrations):
    tour_id = make_tour(capacity=1)
    registration_service.create_registration(tour_id, student_id=make_student())

    with pytest.raises(InsufficientCapacity):
        registration_service.create_registration(tour_id, student_id=make_student())

    tour = fresh(Tour, tour_id)
    assert tour.registered == 1
    assert tour_service.status_for(tour, SettingsManager.get()) == 'full'
    _assert_counters_match(tour_id, fresh, count_registrations)


def test_paused_tour_rejected(settings_row, make_tour, make_student):
    tour_id = make_tour(paused=True)
    with pytest.raises(TourPaused):
        registration_service.create_registration(tour_id, student_id=make_student())


def test_canceled_tour_rejected(settings_row, make_tour, make_student):
    # canceled is reported even though canceled tours are also paused
    tour_id = make_tour(paused=True, canceled=True)
    with pytest.raises(TourCanceled):
        registration_service.create_registration(tour_id, student_id=make_student())


def test_unknown_tour_and_student(settings_row, make_tour, make_student):
    with pytest.raises(NotFound):
        registration_service.create_registration('missing', student_id=make_student())
    with pytest.raises(NotFound):
        registration_service.create_registration(make_tour(), student_id='missing')


def test_rejection_leaves_no_partial_writes(settings_row, make_tour, make_student, fresh, count_registrations):
    student_id = make_student()
    tour_id = make_tour(capacity=1)
    registration_service.create_registration(tour_id, student_id=student_id)
    with pytest.raises(AlreadyRegistered):
        registration_service.create_registration(tour_id, student_id=student_id)

    assert fresh(Tour, tour_id).registered == 1
    assert count_registrations() == 1


def test_walk_in_creates_placeholder_student(settings_row, make_tour, fresh):
    tour_id = make_tour(capacity=3)
    registration, tour, student = registration_service.create_walk_in_registration(
        tour_id, '  Visiting Parent ')

    assert student.name == 'Visiting Parent'
    assert student.email.endswith('@walkin.local')
    assert student.student_id == student.id
    assert registration.student_id == student.id
    assert tour.registered == 1
    assert fresh(Tour, tour_id).registered == 1


def test_walk_in_requires_name(settings_row, make_tour):
    with pytest.raises(ValidationError):
        registration_service.create_walk_in_registration(make_tour(), '   ')


def test_walk_in_full_tour(settings_row, make_tour):
    tour_id = make_tour(capacity=2, registered=2)
    with pytest.raises(InsufficientCapacity):
        registration_service.create_walk_in_registration(tour_id, 'Late Arrival')
    assert Student.query.count() == 0


def test_toggle_check_in_by_id_and_code(sample_data, fresh, count_registrations):
    tour_id = sample_data['tour_id']
    registration, _ = registration_service.create_registration(
        tour_id, student_id=sample_data['student_id'])
    registration_id, code = registration.id, registration.code

    toggled = registration_service.toggle_check_in(registration_id)
    assert toggled.checked_in is True
    assert fresh(Tour, tour_id).checked_in == 1

    toggled = registration_service.toggle_check_in(code.lower())
    assert toggled.checked_in is False
    assert fresh(Tour, tour_id).checked_in == 0
    _assert_counters_match(tour_id, fresh, count_registrations)


def test_toggle_check_in_known_code(sample_data, fresh):
    registration, _ = registration_service.create_registration(
        sample_data['tour_id'], student_id=sample_data['student_id'])
    row = db.session.get(Registration, registration.id)
    row.code = 'AB12C'
    db.session.commit()

    assert registration_service.toggle_check_in('ab12c').checked_in is True
    assert registration_service.toggle_check_in(' AB12C ').checked_in is False


def test_toggle_check_in_unknown(settings_row):
    for identifier in ('', '   ', None, 'ZZZZZ'):
        with pytest.raises(NotFound):
            registration_service.toggle_check_in(identifier)


def test_uncheck_floors_at_zero(settings_row, make_tour, make_student, fresh):
    # Counter already drifted to zero; unchecking must not go negative
    tour_id = make_tour()
    registration, _ = registration_service.create_registration(tour_id, student_id=make_student())
    row = db.session.get(Registration, registration.id)
    row.checked_in = True
    db.session.commit()

    registration_service.toggle_check_in(registration.id)
    assert fresh(Tour, tour_id).checked_in == 0


def test_remove_checked_in_registration(sample_data, fresh, count_registrations):
    tour_id = sample_data['tour_id']
    registration, _ = registration_service.create_registration(
        tour_id, student_id=sample_data['student_id'])
    registration_id = registration.id
    registration_service.toggle_check_in(registration_id)

    removed = registration_service.remove_registration(registration_id)

    assert removed['id'] == registration_id
    assert removed['checked_in'] is True
    tour = fresh(Tour, tour_id)
    assert tour.registered == 0
    assert tour.checked_in == 0
    _assert_counters_match(tour_id, fresh, count_registrations)


def test_remove_frees_seat_for_someone_else(settings_row, make_tour, make_student):
    tour_id = make_tour(capacity=1)
    registration, _ = registration_service.create_registration(tour_id, student_id=make_student())
    registration_service.remove_registration(registration.id)

    _, tour = registration_service.create_registration(tour_id, student_id=make_student())
    assert tour.registered == 1


def test_remove_unknown_registration(settings_row):
    with pytest.raises(NotFound):
        registration_service.remove_registration('missing')


def test_list_registrations_filters_and_order(settings_row, make_tour, make_student):
    tour_a, tour_b = make_tour(), make_tour()
    ada, bob = make_student(), make_student()
    registration_service.create_registration(tour_a, student_id=ada)
    registration_service.create_registration(tour_b, student_id=ada)
    registration_service.create_registration(tour_a, student_id=bob)

    assert len(registration_service.list_registrations()) == 3
    assert {r.student_id for r in registration_service.list_registrations(tour_id=tour_a)} == {ada, bob}
    assert {r.tour_id for r in registration_service.list_registrations(student_id=ada)} == {tour_a, tour_b}
    assert registration_service.list_registrations(tour_id=tour_b, student_id=bob) == []

    listed = registration_service.list_registrations()
    stamps = [r.created_at for r in listed]
    assert stamps == sorted(stamps, reverse=True)
    assert all(r.tour.status for r in listed)


def test_counters_survive_a_busy_session(settings_row, make_tour, make_student, fresh, count_registrations):
    tour_id = make_tour(capacity=4)
    students = [make_student() for _ in range(6)]
    ids = []
    for student_id in students:
        try:
            registration, _ = registration_service.create_registration(tour_id, student_id=student_id)
            ids.append(registration.id)
        except InsufficientCapacity:
            pass

    assert len(ids) == 4
    registration_service.toggle_check_in(ids[0])
    registration_service.toggle_check_in(ids[1])
    registration_service.remove_registration(ids[1])
    registration_service.toggle_check_in(ids[2])
    registration_service.toggle_check_in(ids[2])

    tour = fresh(Tour, tour_id)
    assert tour.registered == 3
    assert tour.checked_in == 1
    _assert_counters_match(tour_id, fresh, count_registrations)


def _book_concurrently(app, bookings):
    """Run each (tour_id, student_id) booking on its own thread and app context."""
    barrier = threading.Barrier(len(bookings))
    outcomes = []
    lock = threading.Lock()

    def worker(tour_id, student_id):
        with app.app_context():
            barrier.wait()
            try:
                registration_service.create_registration(tour_id, student_id=student_id)
                outcome = 'ok'
            except TourBookingError as e:
                outcome = e.code
            except Exception as e:
                outcome = type(e).__name__
            finally:
                db.session.remove()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker, args=booking) for booking in bookings]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


def test_concurrent_bookings_never_overbook(app, settings_row, make_tour, make_student, fresh, count_registrations):
    tour_id = make_tour(capacity=3)
    students = [make_student() for _ in range(8)]

    outcomes = _book_concurrently(app, [(tour_id, s) for s in students])

    assert len(outcomes) == 8
    assert outcomes.count('ok') == 3
    assert outcomes.count(InsufficientCapacity.code) == 5
    assert fresh(Tour, tour_id).registered == 3
    _assert_counters_match(tour_id, fresh, count_registrations)


def test_concurrent_bookings_respect_tour_limit(app, settings_row, make_tour, make_student, count_registrations):
    student_id = make_student()
    tours = [make_tour() for _ in range(5)]

    outcomes = _book_concurrently(app, [(t, student_id) for t in tours])

    assert len(outcomes) == 5
    assert outcomes.count('ok') == 2
    assert outcomes.count(TourLimitReached.code) == 3
    assert count_registrations(student_id=student_id) == 2
