from flask import current_app

from campus_tours import db
from campus_tours.models.tour import Tour, STATUS_OVERRIDES
from campus_tours.services.exceptions import InvalidCapacity, NotFound, ValidationError
from campus_tours.services.settings_manager import SettingsManager, TourSettings
from campus_tours.utils.db_utils import get_for_update


ALMOST_FULL_FRACTION = 0.10

STATUS_AVAILABLE = "available"
STATUS_FILLING_FAST = "filling-fast"
STATUS_ALMOST_FULL = "almost-full"
STATUS_FULL = "full"
STATUS_PAUSED = "paused"
STATUS_CANCELED = "canceled"

# Value accepted on update to clear a manual override
CLEAR_OVERRIDE = "none"

UPDATABLE_FIELDS = (
    "name",
    "start_time",
    "end_time",
    "capacity",
    "paused",
    "canceled",
    "status_override",
)


def derive_status(capacity, registered, paused, canceled, status_override,
                  filling_fast_threshold):
    """
    Display status of a tour; the first matching rule wins.

    canceled > paused > full > manual override > almost-full (<= 10% left)
    > filling-fast (<= threshold left) > available.
    """
    if canceled:
        return STATUS_CANCELED
    if paused:
        return STATUS_PAUSED

    remaining = max(capacity - registered, 0)
    if remaining == 0:
        return STATUS_FULL

    if status_override == STATUS_AVAILABLE:
        return STATUS_AVAILABLE
    if status_override == STATUS_FILLING_FAST:
        return STATUS_FILLING_FAST

    percent_remaining = remaining / capacity
    if percent_remaining <= ALMOST_FULL_FRACTION:
        return STATUS_ALMOST_FULL
    if percent_remaining <= filling_fast_threshold:
        return STATUS_FILLING_FAST
    return STATUS_AVAILABLE


def status_for(tour, settings: TourSettings):
    return derive_status(
        tour.capacity,
        tour.registered,
        tour.paused,
        tour.canceled,
        tour.status_override,
        settings.filling_fast_threshold,
    )


def annotate(tours, settings=None):
    """Attach the derived ``status`` to each tour for serialization."""
    settings = settings or SettingsManager.get()
    single = isinstance(tours, Tour)
    for tour in [tours] if single else tours:
        tour.status = status_for(tour, settings)
    return tours


def list_tours():
    tours = Tour.query.order_by(Tour.start_time.asc()).all()
    return annotate(tours)


def get_tour(tour_id):
    tour = db.session.get(Tour, tour_id)
    if not tour:
        raise NotFound("Tour not found")
    return annotate(tour)


def create_tour(data):
    """Create a tour from validated data (name, start_time, end_time, capacity)."""
    capacity = data.get("capacity")
    if capacity is None or capacity < 1:
        raise ValidationError("capacity must be a positive integer")
    if data["end_time"] < data["start_time"]:
        raise ValidationError("endTime must not be before startTime")

    tour = Tour()
    tour.name = data["name"]
    tour.start_time = data["start_time"]
    tour.end_time = data["end_time"]
    tour.capacity = capacity
    tour.registered = 0
    tour.checked_in = 0
    tour.paused = False
    tour.canceled = False
    db.session.add(tour)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"[tours] Created tour {tour.id} '{tour.name}' capacity={capacity}")
    return get_tour(tour.id)


def update_tour(tour_id, changes):
    """
    Partial update; keys missing or None are left unchanged.

    Raises:
        NotFound: no such tour
        InvalidCapacity: new capacity below the current registered count
        ValidationError: bad override value or schedule
    """
    changes = {
        k: v for k, v in (changes or {}).items() if k in UPDATABLE_FIELDS and v is not None
    }

    try:
        # Lock the row so a concurrent registration cannot slip in between
        # the capacity check and the write.
        tour = get_for_update(Tour, tour_id)
        if not tour:
            raise NotFound("Tour not found")

        if "capacity" in changes:
            capacity = changes["capacity"]
            if capacity < 1:
                raise ValidationError("capacity must be a positive integer")
            if capacity < tour.registered:
                raise InvalidCapacity()

        if "status_override" in changes:
            override = changes["status_override"]
            if override == CLEAR_OVERRIDE:
                changes["status_override"] = None
            elif override not in STATUS_OVERRIDES:
                raise ValidationError(
                    "statusOverride must be one of available, filling-fast, none"
                )

        start = changes.get("start_time", tour.start_time)
        end = changes.get("end_time", tour.end_time)
        if end < start:
            raise ValidationError("endTime must not be before startTime")

        for key, value in changes.items():
            setattr(tour, key, value)
        db.session.commit()
    except InvalidCapacity:
        db.session.rollback()
        current_app.logger.warning(
            f"[tours] Rejected capacity {changes.get('capacity')} for tour {tour_id}: below registered"
        )
        raise
    except Exception:
        db.session.rollback()
        raise

    if changes:
        current_app.logger.info(f"[tours] Updated tour {tour_id}: {sorted(changes)}")
    return get_tour(tour_id)


def override_capacity(tour_id, capacity):
    return update_tour(tour_id, {"capacity": capacity})


def pause_tour(tour_id):
    return update_tour(tour_id, {"paused": True})


def resume_tour(tour_id):
    return update_tour(tour_id, {"paused": False})


def cancel_tour(tour_id):
    return update_tour(tour_id, {"canceled": True, "paused": True})


def uncancel_tour(tour_id):
    return update_tour(tour_id, {"canceled": False, "paused": False})


def delete_tour(tour_id):
    """Delete a tour together with all of its registrations."""
    tour = db.session.get(Tour, tour_id)
    if not tour:
        raise NotFound("Tour not found")

    dropped = len(tour.registrations)
    try:
        db.session.delete(tour)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        f"[tours] Deleted tour {tour_id} and {dropped} registration(s)"
    )
    return {"id": tour_id}
