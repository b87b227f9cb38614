from campus_tours.schemas.tour_schema import (
    tour_schema, tours_schema, tour_update_schema, capacity_override_schema)
from campus_tours.schemas.student_schema import student_schema, students_schema
from campus_tours.schemas.registration_schema import (
    registration_schema, registrations_schema, registration_create_schema, check_in_schema)
from campus_tours.schemas.settings_schema import settings_schema, settings_update_schema
from campus_tours.schemas.user_schema import user_schema, user_login_schema

__all__ = [
    'tour_schema', 'tours_schema', 'tour_update_schema', 'capacity_override_schema',
    'student_schema', 'students_schema',
    'registration_schema', 'registrations_schema', 'registration_create_schema',
    'check_in_schema',
    'settings_schema', 'settings_update_schema',
    'user_schema', 'user_login_schema'
]
