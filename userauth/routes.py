"""Provides the JSON API of the authentication service."""

from datetime import datetime
from http import HTTPStatus as status
import logging

from pytz import UTC
from flask import Blueprint, Response, jsonify, request

from .controllers import authentication, passwords, registration
from .guard import authenticated
from .services import users
from .services.store import current_store

logger = logging.getLogger(__name__)

blueprint = Blueprint('auth', __name__)
"""Authentication routes; mounted under ``URL_PREFIX``."""

status_blueprint = Blueprint('status', __name__, url_prefix='')


def _params() -> dict:
    """Get the request payload, from a JSON object or a form."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def _respond(data: dict, code: int, headers: dict) -> Response:
    response: Response = jsonify(data)
    response.status_code = code
    response.headers.extend(headers)
    return response


@blueprint.route('/register/request', methods=['POST'])
def register_request() -> Response:
    """Create an unverified account and send a verification code."""
    return _respond(*registration.request_registration(_params()))


@blueprint.route('/register/verify', methods=['POST'])
def register_verify() -> Response:
    """Verify an account with the code sent to it."""
    return _respond(*registration.verify_registration(_params()))


@blueprint.route('/login', methods=['POST'])
def login() -> Response:
    """Log in with e-mail and password."""
    return _respond(*authentication.login(_params()))


@blueprint.route('/logout', methods=['POST'])
def logout() -> Response:
    """Revoke the presented session token."""
    authorization = request.headers.get('Authorization')
    return _respond(*authentication.logout(authorization))


@blueprint.route('/password/forgot', methods=['POST'])
def forgot_password() -> Response:
    """Send a password reset code."""
    return _respond(*passwords.forgot_password(_params()))


@blueprint.route('/password/reset', methods=['POST'])
def reset_password() -> Response:
    """Set a new password with a reset code."""
    return _respond(*passwords.reset_password(_params()))


@blueprint.route('/password', methods=['PUT'])
@authenticated
def change_password() -> Response:
    """Change the password of the logged-in user."""
    return _respond(*passwords.change_password(_params(), request.auth))


def _connected(available: bool) -> str:
    return 'connected' if available else 'disconnected'


@status_blueprint.route('/', methods=['GET'])
def service_status() -> Response:
    """Service banner."""
    data = {'ok': True, 'message': 'userauth service',
            'db': _connected(users.is_available())}
    return _respond(data, status.OK, {})


@status_blueprint.route('/health', methods=['GET'])
def health() -> Response:
    """Report on the availability of the backing services."""
    data = {
        'status': 'ok',
        'db': _connected(users.is_available()),
        'redis': _connected(current_store().is_available()),
        'timestamp': datetime.now(tz=UTC).isoformat()
    }
    return _respond(data, status.OK, {})
