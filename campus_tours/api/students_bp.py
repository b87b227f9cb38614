from flask import Blueprint, request, current_app
from marshmallow import ValidationError as SchemaValidationError

from campus_tours.schemas import student_schema, students_schema
from campus_tours.services import student_service
from campus_tours.services.exceptions import TourBookingError
from campus_tours.utils.responses import error_response, success_response, validation_message

students_bp = Blueprint('students', __name__, url_prefix='/api/students')


@students_bp.route('', methods=['GET'])
def search_students():
    try:
        q = request.args.get('q', '')
        return success_response(students_schema.dump(student_service.search_students(q)))
    except Exception:
        current_app.logger.exception('[students] Error searching students')
        return error_response('Unable to search students', 500)


@students_bp.route('', methods=['POST'])
def create_student():
    try:
        data = student_schema.load(request.get_json(silent=True) or {})
        student = student_service.upsert_student(
            data['name'], data['email'], data['student_id'])
        return success_response(student_schema.dump(student), 201)

    except SchemaValidationError as e:
        return error_response(validation_message(e), 400)

    except TourBookingError as e:
        return error_response(e.message, e.status_code)

    except Exception:
        current_app.logger.exception('[students] Error creating student')
        return error_response('Unable to create student', 500)
