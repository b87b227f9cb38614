from flask import jsonify


def success_response(data, status=200):
    """Wrap a payload in the ``{"data": ...}`` envelope."""
    return jsonify({"data": data}), status


def error_response(message, status):
    """Wrap a failure in the ``{"error": "..."}`` envelope."""
    return jsonify({"error": message}), status


def validation_message(err):
    """First human-readable message out of a marshmallow ValidationError."""
    messages = getattr(err, "messages", None)

    def first(value):
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple)):
            for item in value:
                found = first(item)
                if found:
                    return found
        if isinstance(value, dict):
            for key, item in value.items():
                found = first(item)
                if found:
                    if found.startswith(("Missing data", "Not a valid", "Field may not")):
                        return f"{key}: {found}"
                    return found
        return None

    return first(messages) or str(err) or "Invalid request"
