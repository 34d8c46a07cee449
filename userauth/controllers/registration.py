"""
Controllers for registration: requesting an account, and verifying it.

A new account is created unverified, and a six-digit verification code is sent
to the registered address. The account can log in once that code has been
presented at :func:`verify_registration`.
"""

from http import HTTPStatus as status
import logging

from flask import current_app
from werkzeug.exceptions import BadRequest, InternalServerError, NotFound

from .. import codes, domain, validation
from ..passwords import hash_password
from ..services import users
from ..services.exceptions import DeliveryFailed, StoreWriteFailed, \
    UserExists
from ..services.mail import current_mailer
from ..services.store import current_store
from .util import ResponseData, require, clean_email, clean_code, \
    check_code, load_user_by_email, CODE_LENGTH, PASSWORD_TOO_SHORT, \
    USER_NOT_FOUND

logger = logging.getLogger(__name__)

ALREADY_REGISTERED = 'email already registered'


def request_registration(params: dict) -> ResponseData:
    """
    Create an unverified account, and send it a verification code.

    The existence check, the insert and the code write happen inside one
    transaction; if the code cannot be stored, the account is not created.

    Parameters
    ----------
    params : dict
        Request payload, with ``email`` and ``password``.

    Returns
    -------
    dict
        Response data.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`BadRequest`
        Raised if the input is invalid, or the address is already registered.
    :class:`InternalServerError`
        Raised if the verification code could not be stored.

    """
    require(params, 'email', 'password')
    email = clean_email(params['email'])
    password = params['password']
    if not validation.validate_password(password):
        raise BadRequest(PASSWORD_TOO_SHORT)

    config = current_app.config
    ttl = int(config['VERIFICATION_CODE_TTL'])
    store = current_store()
    code = codes.generate(CODE_LENGTH)
    try:
        with users.transaction():
            if users.get_user_by_email(email) is not None:
                raise UserExists(f'{email} is already registered')
            password_hash = hash_password(password,
                                          int(config['BCRYPT_ROUNDS']))
            user = users.create_user(email, password_hash)
            store.put_code(domain.Purpose.VERIFICATION, email, code, ttl)
    except UserExists as e:
        logger.debug('Registration refused: %s', e)
        raise BadRequest(ALREADY_REGISTERED) from e
    except StoreWriteFailed as e:
        logger.error('Could not store verification code: %s', e)
        raise InternalServerError('failed to store verification code') from e
    logger.info('Registered user %s', user.user_id)

    try:
        current_mailer().send_verification_code(email, code, ttl)
    except DeliveryFailed as e:
        logger.error('Could not send verification code: %s', e)
    data = {'ok': True, 'message': 'verification code sent to email'}
    return data, status.OK, {}


def verify_registration(params: dict) -> ResponseData:
    """
    Mark an account as verified, given the code that was sent to it.

    Verifying an account that is already verified succeeds, whatever code is
    presented. A wrong code leaves both the account and the live code as they
    were.

    Parameters
    ----------
    params : dict
        Request payload, with ``email`` and ``code``.

    Returns
    -------
    dict
        Response data.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`BadRequest`
        Raised if the input is invalid, or the code is absent or wrong.
    :class:`NotFound`
        Raised if there is no account for the address.
    :class:`InternalServerError`
        Raised if the live code could not be read.

    """
    require(params, 'email', 'code')
    email = clean_email(params['email'])
    code = clean_code(params['code'])

    store = current_store()
    user = load_user_by_email(email)
    if user is not None and user.verified:
        store.discard_code(domain.Purpose.VERIFICATION, email)
        return {'ok': True}, status.OK, {}

    check_code(store, domain.Purpose.VERIFICATION, email, code,
               'failed to verify code')
    if user is None:
        raise NotFound(USER_NOT_FOUND)

    with users.transaction():
        users.update_user(user.user_id, verified=True)
    logger.info('Verified user %s', user.user_id)
    store.discard_code(domain.Purpose.VERIFICATION, email)
    return {'ok': True}, status.OK, {}
