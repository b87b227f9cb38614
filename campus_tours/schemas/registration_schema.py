from marshmallow import EXCLUDE, fields, validates_schema, ValidationError
from campus_tours import ma
from campus_tours.models.registration import Registration
from campus_tours.schemas.student_schema import StudentSchema
from campus_tours.schemas.tour_schema import TourSchema


class RegistrationSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Registration
        load_instance = False
        include_fk = True

    id = fields.Str(dump_only=True)
    student_id = fields.Str(dump_only=True, data_key='studentId')
    tour_id = fields.Str(dump_only=True, data_key='tourId')
    # One seat per registration; kept for clients that render ticket counts
    tickets = fields.Constant(1, dump_only=True)
    code = fields.Str(dump_only=True)
    checked_in = fields.Bool(dump_only=True, data_key='checkedIn')
    created_at = fields.DateTime(dump_only=True, data_key='createdAt')

    student = fields.Nested(StudentSchema, dump_only=True)
    tour = fields.Nested(TourSchema, dump_only=True)


class RegistrationCreateSchema(ma.Schema):
    """
    POST /api/registrations body.

    One of ``studentId`` (existing student), ``student`` (new student,
    upserted by email) or ``name`` (walk-in) is required.
    """

    class Meta:
        unknown = EXCLUDE

    tour_id = fields.Str(required=True, data_key='tourId',
                         error_messages={'required': 'tourId is required',
                                         'null': 'tourId is required'})
    student_id = fields.Str(load_default=None, allow_none=True, data_key='studentId')
    student = fields.Nested(StudentSchema, load_default=None, allow_none=True)
    name = fields.Str(load_default=None, allow_none=True)

    @validates_schema
    def validate_student_source(self, data, **kwargs):
        if not data.get('tour_id'):
            raise ValidationError('tourId is required', 'tourId')
        if not data.get('student_id') and not data.get('student') and not (data.get('name') or '').strip():
            raise ValidationError('studentId or student object is required', 'studentId')


class CheckInSchema(ma.Schema):
    id = fields.Str()
    checked_in = fields.Bool(data_key='checkedIn')


# Flat shape for create/remove responses; listings embed student and tour
registration_schema = RegistrationSchema(exclude=('student', 'tour'))
registrations_schema = RegistrationSchema(many=True)
registration_create_schema = RegistrationCreateSchema()
check_in_schema = CheckInSchema()
