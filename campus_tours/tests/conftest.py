from campus_tours.models.registration import Registration
from campus_tours.models.settings import Settings, SETTINGS_ROW_ID
from campus_tours.models.student import Student
from campus_tours.models.tour import Tour
from campus_tours.models.user import User
from campus_tours import create_app, db
import pytest
import sys
import os
from datetime import datetime, timedelta

# Make the repository root importable when pytest runs from a checkout
sys.path.insert(0, os.path.abspath('.'))

TOUR_START = datetime(2025, 4, 12, 10, 0, 0)


@pytest.fixture
def app(monkeypatch):
    """Test app on the SQLite file from TestingConfig, shared by requests and the test session."""
    for key in ('APP_MAX_TOURS_PER_STUDENT', 'APP_FILLING_FAST_THRESHOLD', 'APP_ANNOUNCEMENT'):
        monkeypatch.delenv(key, raising=False)

    _app = create_app('testing')

    with _app.app_context():
        # Start clean even if a previous run was interrupted
        db.drop_all()
        db.create_all()

        yield _app

        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Bearer header for an active Admin user."""
    user = User()
    user.username = 'testadmin'
    user.email = 'admin@test.edu'
    user.role = 'Admin'
    user.set_password('testpassword')
    db.session.add(user)
    db.session.commit()

    from flask_jwt_extended import create_access_token
    token = create_access_token(identity=str(user.id))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def staff_headers(app):
    user = User()
    user.username = 'teststaff'
    user.email = 'staff@test.edu'
    user.role = 'Staff'
    user.set_password('testpassword')
    db.session.add(user)
    db.session.commit()

    from flask_jwt_extended import create_access_token
    token = create_access_token(identity=str(user.id))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def settings_row(app):
    row = Settings(
        id=SETTINGS_ROW_ID,
        max_tours_per_student=2,
        filling_fast_threshold=0.25,
        announcement='Tours leave from the welcome center',
    )
    db.session.add(row)
    db.session.commit()
    return row


@pytest.fixture
def make_tour(app):
    """Factory returning the id of a new tour."""
    counter = {'n': 0}

    def _make_tour(capacity=25, registered=0, checked_in=0, paused=False,
                   canceled=False, status_override=None, name=None):
        counter['n'] += 1
        tour = Tour()
        tour.name = name or f'Campus tour {counter["n"]}'
        tour.start_time = TOUR_START + timedelta(hours=counter['n'])
        tour.end_time = tour.start_time + timedelta(hours=1)
        tour.capacity = capacity
        tour.registered = registered
        tour.checked_in = checked_in
        tour.paused = paused
        tour.canceled = canceled
        tour.status_override = status_override
        db.session.add(tour)
        db.session.commit()
        return tour.id

    return _make_tour


@pytest.fixture
def make_student(app):
    counter = {'n': 0}

    def _make_student(name=None, email=None, student_id=None):
        counter['n'] += 1
        student = Student()
        student.name = name or f'Student {counter["n"]}'
        student.email = email or f'student{counter["n"]}@campus.edu'
        student.student_id = student_id or f'S{1000 + counter["n"]}'
        db.session.add(student)
        db.session.commit()
        return student.id

    return _make_student


@pytest.fixture
def sample_data(settings_row, make_tour, make_student):
    """IDs only, to avoid DetachedInstanceError across requests."""
    return {
        'tour_id': make_tour(capacity=25),
        'student_id': make_student(name='Ada Lovelace', email='ada@campus.edu',
                                   student_id='S0001'),
    }


@pytest.fixture
def fresh(app):
    """Reload a row, discarding whatever the test session has cached."""

    def _fresh(model, pk):
        db.session.expire_all()
        return db.session.get(model, pk)

    return _fresh


@pytest.fixture
def count_registrations(app):
    def _count(**filters):
        db.session.expire_all()
        return Registration.query.filter_by(**filters).count()

    return _count
