from marshmallow import EXCLUDE, fields, validate
from campus_tours import ma
from campus_tours.models.student import Student


class StudentSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Student
        load_instance = False
        unknown = EXCLUDE
        exclude = ('created_at', 'updated_at')

    name = fields.Str(
        required=True, validate=validate.Length(min=1, max=150),
        error_messages={'required': 'name, email, and studentId are required'})
    email = fields.Email(
        required=True, validate=validate.Length(max=255),
        error_messages={'required': 'name, email, and studentId are required'})
    student_id = fields.Str(
        required=True, data_key='studentId', validate=validate.Length(min=1, max=64),
        error_messages={'required': 'name, email, and studentId are required'})

    id = fields.Str(dump_only=True)


student_schema = StudentSchema()
students_schema = StudentSchema(many=True)
