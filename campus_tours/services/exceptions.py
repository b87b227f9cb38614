"""Domain errors raised by the booking services.

Each error carries a stable ``code`` for API consumers and the HTTP status
the blueprints answer with.
"""


class TourBookingError(Exception):
    code = "BOOKING_ERROR"
    status_code = 400
    default_message = "Unable to complete the request"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self):
        return self.message


class ValidationError(TourBookingError):
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class NotFound(TourBookingError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class TourCanceled(TourBookingError):
    code = "TOUR_CANCELED"
    default_message = "Tour is canceled"


class TourPaused(TourBookingError):
    code = "TOUR_PAUSED"
    default_message = "Tour is paused"


class InvalidCapacity(TourBookingError):
    code = "INVALID_CAPACITY"
    default_message = "Capacity cannot be lower than registered count"


class AlreadyRegistered(TourBookingError):
    code = "ALREADY_REGISTERED"
    status_code = 409
    default_message = "Student already registered for this tour"


class TourLimitReached(TourBookingError):
    code = "TOUR_LIMIT_REACHED"
    status_code = 409
    default_message = "Student already registered for maximum tours"


class InsufficientCapacity(TourBookingError):
    code = "INSUFFICIENT_CAPACITY"
    status_code = 409
    default_message = "Not enough capacity"
