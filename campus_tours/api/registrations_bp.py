from flask import Blueprint, request, current_app
from marshmallow import ValidationError as SchemaValidationError

from campus_tours.schemas import (
    check_in_schema,
    registration_create_schema,
    registration_schema,
    registrations_schema,
    student_schema,
    tour_schema,
)
from campus_tours.services import registration_service
from campus_tours.services.exceptions import TourBookingError
from campus_tours.utils.responses import error_response, success_response, validation_message

registrations_bp = Blueprint(
    'registrations', __name__, url_prefix='/api/registrations')


@registrations_bp.route('', methods=['GET'])
def list_registrations():
    try:
        registrations = registration_service.list_registrations(
            tour_id=request.args.get('tourId') or None,
            student_id=request.args.get('studentId') or None,
        )
        return success_response(registrations_schema.dump(registrations))
    except Exception:
        current_app.logger.exception('[registrations] Error listing registrations')
        return error_response('Unable to list registrations', 500)


# Existing student, new student or walk-in


@registrations_bp.route('', methods=['POST'])
def create_registration():
    try:
        payload = registration_create_schema.load(request.get_json(silent=True) or {})

        if payload.get('student_id') or payload.get('student'):
            registration, tour = registration_service.create_registration(
                payload['tour_id'],
                student_id=payload.get('student_id'),
                student_data=payload.get('student'),
            )
            body = {
                'registration': registration_schema.dump(registration),
                'tour': tour_schema.dump(tour),
            }
        else:
            registration, tour, student = registration_service.create_walk_in_registration(
                payload['tour_id'], payload.get('name'))
            body = {
                'registration': registration_schema.dump(registration),
                'tour': tour_schema.dump(tour),
                'student': student_schema.dump(student),
            }

        return success_response(body, 201)

    except SchemaValidationError as e:
        return error_response(validation_message(e), 400)

    except TourBookingError as e:
        return error_response(e.message, e.status_code)

    except Exception:
        current_app.logger.exception('[registrations] Error creating registration')
        return error_response('Unable to create registration', 500)


@registrations_bp.route('/<identifier>/checkin', methods=['PATCH'])
def toggle_check_in(identifier):
    try:
        registration = registration_service.toggle_check_in(identifier)
        return success_response(check_in_schema.dump(registration))

    except TourBookingError as e:
        return error_response(e.message, e.status_code)

    except Exception:
        current_app.logger.exception('[registrations] Error toggling check-in for %s', identifier)
        return error_response('Unable to toggle check-in', 500)


@registrations_bp.route('/<registration_id>', methods=['DELETE'])
def delete_registration(registration_id):
    try:
        removed = registration_service.remove_registration(registration_id)
        return success_response(registration_schema.dump(removed))

    except TourBookingError as e:
        return error_response(e.message, e.status_code)

    except Exception:
        current_app.logger.exception('[registrations] Error removing registration %s', registration_id)
        return error_response('Unable to remove registration', 500)
