from campus_tours.models.tour import Tour
from campus_tours.models.student import Student
from campus_tours.models.registration import Registration
from campus_tours.models.settings import Settings
from campus_tours.models.user import User

__all__ = [
    'Tour', 'Student', 'Registration', 'Settings', 'User'
]
