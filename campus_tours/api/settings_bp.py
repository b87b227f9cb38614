"""Settings endpoints: read by every screen, written from the admin panel."""

from flask import Blueprint, request, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError as SchemaValidationError

from campus_tours.schemas import settings_schema, settings_update_schema
from campus_tours.services.exceptions import TourBookingError
from campus_tours.services.settings_manager import SettingsManager
from campus_tours.utils.auth_helpers import require_admin
from campus_tours.utils.responses import error_response, success_response, validation_message

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.route("", methods=["GET"])
def get_settings():
    try:
        return success_response(settings_schema.dump(SettingsManager.get()))
    except Exception:
        current_app.logger.exception("[settings] Error reading settings")
        return error_response("Unable to read settings", 500)


@settings_bp.route("", methods=["PATCH"])
@require_admin
def update_settings():
    try:
        changes = settings_update_schema.load(request.get_json(silent=True) or {})
        user_id = None
        if current_app.config.get("ADMIN_AUTH_REQUIRED", True):
            user_id = get_jwt_identity()
        updated = SettingsManager.update(changes, user_id=user_id)
        return success_response(settings_schema.dump(updated))

    except SchemaValidationError as e:
        return error_response(validation_message(e), 400)

    except TourBookingError as e:
        current_app.logger.warning(f"[settings] Update rejected: {e.message}")
        return error_response(e.message, e.status_code)

    except RuntimeError:
        current_app.logger.exception("[settings] Error writing settings")
        return error_response("Unable to update settings", 500)

    except Exception:
        current_app.logger.exception("[settings] Unexpected error updating settings")
        return error_response("Unable to update settings", 500)
