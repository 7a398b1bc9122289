"""Flask configuration."""

import os

VERSION = '1.0.0'

SECRET_KEY = os.environ.get('SECRET_KEY', 'asdf1234')
SERVER_NAME = os.environ.get('ADVOCATE_SERVER_NAME')

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'production')
"""Anything other than ``production`` exposes internal error details."""

LOGFILE = os.environ.get('LOGFILE')
LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))

FRONTEND_URL = os.environ.get('FRONTEND_URL', '*')

JWT_SECRET = os.environ.get('JWT_SECRET', 'foosecret')
JWT_EXPIRES_IN = int(os.environ.get('JWT_EXPIRES_IN', 7 * 24 * 60 * 60))
"""Lifetime of issued access tokens, in seconds."""

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///advocate.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', '1')))

RATE_LIMIT_BACKEND = os.environ.get('RATE_LIMIT_BACKEND', 'memory')
"""Either ``memory`` (per process) or ``redis`` (shared across instances)."""

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')

USER_RATE_LIMIT_MAX = int(os.environ.get('USER_RATE_LIMIT_MAX', 100))
USER_RATE_LIMIT_WINDOW = int(os.environ.get('USER_RATE_LIMIT_WINDOW', 15 * 60))

GLOBAL_RATE_LIMIT_MAX = int(os.environ.get('GLOBAL_RATE_LIMIT_MAX', 100))
GLOBAL_RATE_LIMIT_WINDOW = int(os.environ.get('GLOBAL_RATE_LIMIT_WINDOW',
                                              15 * 60))
"""Per-client-address limit applied to every request; 0 disables it."""

RISK_STRICT_FACTORS = bool(int(os.environ.get('RISK_STRICT_FACTORS', '0')))
"""Reject unrecognized risk factor keys instead of skipping them."""

UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'uploads/documents')
"""Directory that uploaded document files are kept in."""

MAX_FILE_SIZE = int(os.environ.get('MAX_FILE_SIZE', 50 * 1024 * 1024))
MAX_FILES_PER_UPLOAD = int(os.environ.get('MAX_FILES_PER_UPLOAD', 10))
MAX_CONTENT_LENGTH = MAX_FILE_SIZE * MAX_FILES_PER_UPLOAD + 1024 * 1024
"""Larger request bodies are refused before they are read."""
