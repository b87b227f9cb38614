from flask import Blueprint, request, current_app
from marshmallow import ValidationError as SchemaValidationError

from campus_tours.schemas import (
    capacity_override_schema,
    tour_schema,
    tour_update_schema,
    tours_schema,
)
from campus_tours.services import tour_service
from campus_tours.services.exceptions import TourBookingError
from campus_tours.utils.auth_helpers import require_admin
from campus_tours.utils.responses import error_response, success_response, validation_message

tours_bp = Blueprint("tours", __name__, url_prefix="/api/tours")


def _failure(e, action):
    """Map an exception raised while handling a tour request to the envelope."""
    if isinstance(e, SchemaValidationError):
        return error_response(validation_message(e), 400)
    if isinstance(e, TourBookingError):
        return error_response(e.message, e.status_code)
    current_app.logger.exception(f"[tours] Unexpected error: {action}")
    return error_response(f"Unable to {action}", 500)


# Display board and worker portal read these without logging in


@tours_bp.route("", methods=["GET"])
def list_tours():
    try:
        return success_response(tours_schema.dump(tour_service.list_tours()))
    except Exception as e:
        return _failure(e, "list tours")


@tours_bp.route("", methods=["POST"])
@require_admin
def create_tour():
    try:
        data = tour_schema.load(request.get_json(silent=True) or {})
        tour = tour_service.create_tour(data)
        return success_response(tour_schema.dump(tour), 201)
    except Exception as e:
        return _failure(e, "create tour")


@tours_bp.route("/<tour_id>", methods=["GET"])
def get_tour(tour_id):
    try:
        return success_response(tour_schema.dump(tour_service.get_tour(tour_id)))
    except Exception as e:
        return _failure(e, "get tour")


@tours_bp.route("/<tour_id>", methods=["PATCH"])
@require_admin
def update_tour(tour_id):
    try:
        changes = tour_update_schema.load(request.get_json(silent=True) or {})
        tour = tour_service.update_tour(tour_id, changes)
        return success_response(tour_schema.dump(tour))
    except Exception as e:
        return _failure(e, "update tour")


@tours_bp.route("/<tour_id>", methods=["DELETE"])
@require_admin
def delete_tour(tour_id):
    try:
        return success_response(tour_service.delete_tour(tour_id))
    except Exception as e:
        return _failure(e, "delete tour")


# Admin panel shortcuts


@tours_bp.route("/<tour_id>/pause", methods=["POST"])
@require_admin
def pause_tour(tour_id):
    try:
        return success_response(tour_schema.dump(tour_service.pause_tour(tour_id)))
    except Exception as e:
        return _failure(e, "pause tour")


@tours_bp.route("/<tour_id>/resume", methods=["POST"])
@require_admin
def resume_tour(tour_id):
    try:
        return success_response(tour_schema.dump(tour_service.resume_tour(tour_id)))
    except Exception as e:
        return _failure(e, "resume tour")


@tours_bp.route("/<tour_id>/cancel", methods=["POST"])
@require_admin
def cancel_tour(tour_id):
    try:
        tour = tour_service.cancel_tour(tour_id)
        current_app.logger.info(f"[tours] Tour {tour_id} canceled")
        return success_response(tour_schema.dump(tour))
    except Exception as e:
        return _failure(e, "cancel tour")


@tours_bp.route("/<tour_id>/uncancel", methods=["POST"])
@require_admin
def uncancel_tour(tour_id):
    try:
        return success_response(tour_schema.dump(tour_service.uncancel_tour(tour_id)))
    except Exception as e:
        return _failure(e, "uncancel tour")


@tours_bp.route("/<tour_id>/override-capacity", methods=["POST"])
@require_admin
def override_capacity(tour_id):
    try:
        data = capacity_override_schema.load(request.get_json(silent=True) or {})
        tour = tour_service.override_capacity(tour_id, data["capacity"])
        return success_response(tour_schema.dump(tour))
    except Exception as e:
        return _failure(e, "override capacity")
