from marshmallow import fields, validate
from campus_tours import ma
from campus_tours.models.user import User


class UserSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = User
        load_instance = False
        exclude = ('password_hash', 'created_at')

    id = fields.Int(dump_only=True)
    is_active = fields.Bool(dump_only=True, data_key='isActive')


class UserLoginSchema(ma.Schema):
    username = fields.Str(required=True, validate=validate.Length(min=1),
                          error_messages={'required': 'username and password are required'})
    password = fields.Str(required=True, validate=validate.Length(min=1),
                          error_messages={'required': 'username and password are required'})


user_schema = UserSchema()
user_login_schema = UserLoginSchema()
