"""Application factory for the advocate API."""

import logging
import time
from datetime import datetime
from typing import Optional

from flask import Flask, Response, current_app, jsonify, request
from flask_cors import CORS
from pytz import UTC
from werkzeug.exceptions import HTTPException

from . import errors, status
from .app_logging import setup_logger
from .auth.gates import get_rate_store
from .auth.ratelimit import InMemoryRateWindowStore, RateWindowStore, \
    SlidingWindowLimiter
from .encode import ISO8601JSONProvider
from .routes import auth, cases, chat, communication, documents, journal, \
    resources, users
from .services import database, files, rate_windows

logger = logging.getLogger(__name__)

CLIENT_LIMIT_MESSAGE = 'Too many requests from this IP, please try again later.'


def create_web_app() -> Flask:
    """Initialize and configure the advocate application."""
    app = Flask('advocate')
    app.config.from_pyfile('config.py')
    app.json = ISO8601JSONProvider(app)
    app.config['STARTED'] = time.time()

    setup_logger(app.config['LOGLEVEL'], app.config.get('LOGFILE'))

    database.init_app(app)
    rate_windows.init_app(app)
    app.extensions['advocate.rate_store'] = create_rate_store(app)
    files.init_app(app)
    app.extensions['advocate.file_store'] = files.get_store(app)

    CORS(app, origins=app.config['FRONTEND_URL'],
         methods=['GET', 'POST', 'PUT', 'DELETE', 'PATCH'],
         allow_headers=['Content-Type', 'Authorization'],
         supports_credentials=True)

    app.before_request(limit_clients)
    app.add_url_rule('/api/health', 'health', health)
    app.add_url_rule('/', 'root', root)
    app.register_blueprint(auth.blueprint)
    app.register_blueprint(users.blueprint)
    app.register_blueprint(cases.blueprint)
    app.register_blueprint(chat.blueprint)
    app.register_blueprint(resources.blueprint)
    app.register_blueprint(journal.blueprint)
    app.register_blueprint(documents.blueprint)
    app.register_blueprint(communication.blueprint)

    if app.config['CREATE_DB']:
        with app.app_context():
            database.create_all()

    register_error_handlers(app)
    return app


def create_rate_store(app: Flask) -> RateWindowStore:
    """Get the rate window store selected by ``RATE_LIMIT_BACKEND``."""
    backend = app.config.get('RATE_LIMIT_BACKEND', 'memory')
    if backend == 'redis':
        return rate_windows.get_store(app)
    if backend != 'memory':
        raise ValueError(f'No such rate limit backend: {backend}')
    return InMemoryRateWindowStore()


def limit_clients() -> None:
    """Apply the per-client-address limit to every request."""
    max_requests = current_app.config['GLOBAL_RATE_LIMIT_MAX']
    window = current_app.config['GLOBAL_RATE_LIMIT_WINDOW']
    if not max_requests or not window:
        return
    limiter = SlidingWindowLimiter(get_rate_store(), max_requests, window)
    decision = limiter.check(f'client:{request.remote_addr}')
    if not decision.allowed:
        logger.info('Rate limit exceeded for client %s', request.remote_addr)
        raise errors.RateLimited(decision.retry_after, CLIENT_LIMIT_MESSAGE)


def health() -> tuple:
    """Health check endpoint."""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now(tz=UTC),
        'uptime': time.time() - current_app.config['STARTED']
    }), status.HTTP_200_OK


def root() -> tuple:
    return jsonify({
        'message': 'Personal AI Legal Advocate Backend API',
        'version': current_app.config['VERSION'],
        'documentation': '/api/docs'
    }), status.HTTP_200_OK


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(HTTPException)(jsonify_exception)
    app.errorhandler(Exception)(jsonify_unexpected)


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    if isinstance(error, errors.AdvocateError):
        data = error.to_dict()
    else:
        code = (error.name or 'error').upper().replace(' ', '_')
        data = {'message': error.description, 'code': code}
        if error.code == status.HTTP_404_NOT_FOUND:
            data['message'] = 'Route not found'
    if error.code and error.code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        cause: Optional[BaseException] = error.__cause__
        logger.error('%s: %s', data['code'], cause or error.description)
        if cause is not None and not _production():
            data['error'] = str(cause)
    response: Response = jsonify(data)
    response.status_code = error.code or status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(error, errors.RateLimited):
        response.headers['Retry-After'] = str(error.retry_after)
    return response


def jsonify_unexpected(error: Exception) -> Response:
    """Render an unhandled exception as a generic internal error."""
    logger.exception('Unhandled exception: %s', error)
    wrapped = errors.InternalError()
    if not _production():
        wrapped.extra['error'] = str(error)
    response: Response = jsonify(wrapped.to_dict())
    response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return response


def _production() -> bool:
    return current_app.config.get('ENVIRONMENT') == 'production'
