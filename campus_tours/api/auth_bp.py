from flask import Blueprint, request, current_app
from flask_jwt_extended import create_access_token, jwt_required
from marshmallow import ValidationError as SchemaValidationError

from campus_tours.models.user import User
from campus_tours.schemas import user_login_schema, user_schema
from campus_tours.utils.auth_helpers import get_current_user
from campus_tours.utils.responses import error_response, success_response, validation_message

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

# Staff login (Admin and Staff roles)


@auth_bp.route('/login', methods=['POST'])
def login():
    try:
        data = user_login_schema.load(request.get_json(silent=True) or {})
    except SchemaValidationError as e:
        return error_response(validation_message(e), 400)

    user = User.query.filter_by(username=data['username'], is_active=True).first()

    if user and user.check_password(data['password']):
        access_token = create_access_token(identity=str(user.id))
        current_app.logger.info(f'[auth] {user.username} logged in')
        return success_response({
            'accessToken': access_token,
            'user': user_schema.dump(user),
        })

    current_app.logger.warning(f"[auth] Failed login for {data['username']!r}")
    return error_response('Invalid credentials', 401)


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    user = get_current_user()
    if not user or not user.is_active:
        return error_response('User not found', 401)
    return success_response(user_schema.dump(user))
