"""Controllers for logging in and out."""

from typing import Optional
from http import HTTPStatus as status
import logging

from flask import current_app
from werkzeug.exceptions import BadRequest, Forbidden, Unauthorized

from .. import tokens
from ..passwords import check_password
from ..services.store import current_store
from .util import ResponseData, require, clean_email, load_user_by_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'invalid credentials'


def login(params: dict) -> ResponseData:
    """
    Authenticate a user by e-mail and password, and issue a session token.

    An unknown address and a wrong password get the same response.

    Parameters
    ----------
    params : dict
        Request payload, with ``email`` and ``password``.

    Returns
    -------
    dict
        Response data, with the signed ``token``.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`BadRequest`
        Raised if the input is invalid, or the credentials are wrong.
    :class:`Forbidden`
        Raised if the account has not been verified.

    """
    require(params, 'email', 'password')
    email = clean_email(params['email'])
    password = params['password']

    user = load_user_by_email(email)
    if user is None:
        raise BadRequest(INVALID_CREDENTIALS)
    if not user.verified:
        raise Forbidden('email not verified')
    if not isinstance(password, str) \
            or not check_password(password, user.password_hash):
        logger.debug('Wrong password for user %s', user.user_id)
        raise BadRequest(INVALID_CREDENTIALS)

    config = current_app.config
    token, claims = tokens.issue(user, config['JWT_SECRET'],
                                 config['JWT_EXPIRES_IN'])
    logger.info('Issued token %s for user %s', claims.jti, user.user_id)
    return {'token': token}, status.OK, {}


def logout(authorization: Optional[str]) -> ResponseData:
    """
    Revoke the bearer token presented in ``authorization``.

    Expired tokens are accepted, so long as the signature is valid. The
    revocation marker lives for the rest of the token's lifetime, or for
    ``TOKEN_TTL`` if that is unknown. Failing to write the marker is logged,
    but does not fail the request.

    Raises
    ------
    :class:`Unauthorized`
        Raised if there is no bearer token, or the token is not valid.
    :class:`BadRequest`
        Raised if the token has no identifier.

    """
    token = tokens.parse_bearer(authorization)
    if token is None:
        raise Unauthorized('Unauthorized')

    config = current_app.config
    try:
        claims = tokens.decode(token, config['JWT_SECRET'],
                               verify_expiry=False, require_identity=False)
    except tokens.InvalidToken as e:
        logger.debug('Logout with bad token: %s', e)
        raise Unauthorized('invalid or expired token') from e
    if not claims.jti:
        raise BadRequest('invalid token')

    ttl = tokens.remaining_lifetime(claims) or int(config['TOKEN_TTL'])
    if current_store().revoke(claims.jti, ttl):
        logger.info('Revoked token %s', claims.jti)
    return {'ok': True}, status.OK, {}
