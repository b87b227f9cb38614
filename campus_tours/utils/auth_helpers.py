from functools import wraps

from flask import current_app
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from campus_tours import db
from campus_tours.models.user import User
from campus_tours.utils.responses import error_response


def get_current_user():
    """Resolve the User behind the current JWT, or None."""
    try:
        user_id = int(get_jwt_identity())
    except (ValueError, TypeError):
        return None
    return db.session.get(User, user_id)


def require_admin(func):
    """Require an active Admin JWT, unless ADMIN_AUTH_REQUIRED is off."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        if not current_app.config.get("ADMIN_AUTH_REQUIRED", True):
            return func(*args, **kwargs)

        verify_jwt_in_request()
        user = get_current_user()

        if not user or not user.is_active:
            return error_response("User not found", 401)

        if not user.is_admin:
            current_app.logger.warning(
                f"[auth] User {user.username} denied admin route {func.__name__}"
            )
            return error_response("Access denied. Admin role required.", 403)

        return func(*args, **kwargs)

    return wrapper
