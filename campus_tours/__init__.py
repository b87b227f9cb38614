from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_marshmallow import Marshmallow
import logging
import os

# Extensions, bound to the app in create_app()
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
ma = Marshmallow()


def create_app(config_name=None):
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app = Flask(__name__)

    from config import config

    app.config.from_object(config[config_name])
    # Keep camelCase keys in the order the schemas declare them
    app.json.sort_keys = False

    app.logger.setLevel(
        getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    )

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)

    # Import models so Flask-Migrate picks them up
    from campus_tours.models import (  # noqa: F401
        Tour,
        Student,
        Registration,
        Settings,
        User,
    )

    from campus_tours.api.auth_bp import auth_bp
    from campus_tours.api.settings_bp import settings_bp
    from campus_tours.api.tours_bp import tours_bp
    from campus_tours.api.students_bp import students_bp
    from campus_tours.api.registrations_bp import registrations_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(tours_bp)
    app.register_blueprint(students_bp)
    app.register_blueprint(registrations_bp)

    from campus_tours.utils.responses import error_response, success_response

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return error_response(f"Authorization required: {reason}", 401)

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return error_response(f"Invalid token: {reason}", 401)

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return error_response("Token has expired", 401)

    @app.route("/api/health")
    def health():
        return success_response({"status": "ok"})

    @app.errorhandler(404)
    def _not_found(e):
        return error_response("Not found", 404)

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return error_response("Method not allowed", 405)

    return app
