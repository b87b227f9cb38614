import os
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get(
        'SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Build the SQLALCHEMY_DATABASE_URI in a robust way:
    # - Prefer DATABASE_URL if provided (full URI)
    # - Otherwise compose from DB_USER, DB_PASSWORD, DB_HOST, DB_PORT and DB_NAME
    # URL-encode user and password to avoid issues with special characters
    _database_url = os.environ.get('DATABASE_URL')
    if _database_url:
        SQLALCHEMY_DATABASE_URI = _database_url
    else:
        DB_USER = os.environ.get('DB_USER', 'root')
        DB_PASSWORD = os.environ.get('DB_PASSWORD', '')
        DB_HOST = os.environ.get('DB_HOST', 'localhost')
        DB_PORT = os.environ.get('DB_PORT', '')
        DB_NAME = os.environ.get('DB_NAME', 'campus_tours')

        host = f"{DB_HOST}:{DB_PORT}" if DB_PORT else DB_HOST
        user_q = quote_plus(DB_USER)
        pw_q = quote_plus(DB_PASSWORD)
        SQLALCHEMY_DATABASE_URI = f"mysql+pymysql://{user_q}:{pw_q}@{host}/{DB_NAME}"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get(
        'JWT_SECRET_KEY') or 'jwt-secret-string-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = 8 * 3600  # one staff shift
    JWT_TOKEN_LOCATION = ['headers']
    JWT_HEADER_NAME = 'Authorization'
    JWT_HEADER_TYPE = 'Bearer'

    # Admin-only routes (settings, tour management) require an Admin JWT.
    # Turn off for kiosks that drive the admin panel without logging in.
    ADMIN_AUTH_REQUIRED = _env_flag('ADMIN_AUTH_REQUIRED', True)

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    # On-disk SQLite so the request and the test session share one database
    SQLALCHEMY_DATABASE_URI = 'sqlite:///test_campus_tours.db'
    ADMIN_AUTH_REQUIRED = True


class ProductionConfig(Config):
    DEBUG = False


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
