"""Application factory for the authentication service."""

from typing import Optional
from http import HTTPStatus as status
import logging

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from . import config as default_config
from .app_logging import setup_logger
from .routes import blueprint, status_blueprint
from .services import mail, store, users

logger = logging.getLogger(__name__)


def jsonify_exception(error: HTTPException) -> Response:
    """Render an HTTP exception as ``{"error": <description>}``."""
    exc_resp = error.get_response()
    response: Response = jsonify(error=error.description)
    response.status_code = exc_resp.status_code
    for header in ('Allow', 'WWW-Authenticate'):
        if header in exc_resp.headers:
            response.headers[header] = exc_resp.headers[header]
    return response


def handle_unexpected(error: Exception) -> Response:
    """Log an unhandled exception, and respond without detail."""
    logger.exception('Unhandled exception: %s', error)
    response: Response = jsonify(error='internal server error')
    response.status_code = status.INTERNAL_SERVER_ERROR
    return response


def log_request() -> None:
    logger.debug('%s %s', request.method, request.path)


def set_security_headers(response: Response) -> Response:
    response.headers['Content-Security-Policy'] = "frame-ancestors 'none'"
    response.headers['X-Frame-Options'] = 'DENY'
    return response


def create_web_app(config: Optional[dict] = None) -> Flask:
    """
    Initialize and configure the authentication application.

    Parameters
    ----------
    config : dict
        Settings applied on top of :mod:`userauth.config`.

    """
    app = Flask('userauth')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)
    default_config.check(app.config)
    setup_logger(app.config['LOGLEVEL'], app.config['LOG_JSON'])

    users.init_app(app)
    store.init_app(app)
    mail.init_app(app)

    app.register_blueprint(blueprint, url_prefix=app.config['URL_PREFIX'])
    app.register_blueprint(status_blueprint)
    app.register_error_handler(HTTPException, jsonify_exception)
    app.register_error_handler(Exception, handle_unexpected)
    app.before_request(log_request)
    app.after_request(set_security_headers)

    if app.config['CREATE_DB']:
        with app.app_context():
            users.create_all()
    return app
