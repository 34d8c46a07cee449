"""Controllers for forgotten, reset and changed passwords."""

from http import HTTPStatus as status
import logging

from flask import current_app
from werkzeug.exceptions import BadRequest, NotFound

from .. import codes, domain, validation
from ..passwords import check_password, hash_password
from ..services import users
from ..services.exceptions import DeliveryFailed, StoreWriteFailed
from ..services.mail import current_mailer
from ..services.store import current_store
from .util import ResponseData, require, clean_email, clean_code, \
    check_code, load_user_by_email, load_user_by_id, CODE_LENGTH, \
    PASSWORD_TOO_SHORT, USER_NOT_FOUND

logger = logging.getLogger(__name__)


def forgot_password(params: dict) -> ResponseData:
    """
    Send a password reset code, if there is an account for the address.

    The response is the same whether or not the account exists. Failing to
    store or send the code is logged only.

    Raises
    ------
    :class:`BadRequest`
        Raised if the address is missing or malformed.

    """
    require(params, 'email')
    email = clean_email(params['email'])
    data = {'ok': True, 'message': 'reset code sent if email exists'}

    user = load_user_by_email(email)
    if user is None:
        logger.debug('Reset requested for an unknown address')
        return data, status.OK, {}

    ttl = int(current_app.config['RESET_CODE_TTL'])
    code = codes.generate(CODE_LENGTH)
    try:
        current_store().put_code(domain.Purpose.RESET, email, code, ttl)
    except StoreWriteFailed as e:
        logger.error('Could not store reset code: %s', e)
        return data, status.OK, {}
    try:
        current_mailer().send_reset_code(email, code, ttl)
    except DeliveryFailed as e:
        logger.error('Could not send reset code: %s', e)
    return data, status.OK, {}


def reset_password(params: dict) -> ResponseData:
    """
    Set a new password, given the reset code that was sent to the address.

    Parameters
    ----------
    params : dict
        Request payload, with ``email``, ``code`` and ``newPassword``.

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
    require(params, 'email', 'code', 'newPassword')
    email = clean_email(params['email'])
    new_password = params['newPassword']
    if not validation.validate_password(new_password):
        raise BadRequest(PASSWORD_TOO_SHORT)
    code = clean_code(params['code'])

    store = current_store()
    check_code(store, domain.Purpose.RESET, email, code,
               'failed to verify reset code')
    user = load_user_by_email(email)
    if user is None:
        raise NotFound(USER_NOT_FOUND)

    rounds = int(current_app.config['BCRYPT_ROUNDS'])
    with users.transaction():
        users.update_user(user.user_id,
                          password_hash=hash_password(new_password, rounds))
    logger.info('Reset password for user %s', user.user_id)
    store.discard_code(domain.Purpose.RESET, email)
    return {'ok': True}, status.OK, {}


def change_password(params: dict, claims: domain.Claims) -> ResponseData:
    """
    Change the password of the authenticated user.

    Parameters
    ----------
    params : dict
        Request payload, with ``oldPassword`` and ``newPassword``.
    claims : :class:`.domain.Claims`
        Claims of the verified session token.

    Raises
    ------
    :class:`BadRequest`
        Raised if the input is invalid, or the old password is wrong.
    :class:`NotFound`
        Raised if the token's user no longer exists.

    """
    require(params, 'oldPassword', 'newPassword')
    old_password = params['oldPassword']
    new_password = params['newPassword']
    if not validation.validate_password(new_password):
        raise BadRequest(PASSWORD_TOO_SHORT)
    if old_password == new_password:
        raise BadRequest('new password must be different from old password')

    user = load_user_by_id(claims.user_id)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    if not isinstance(old_password, str) \
            or not check_password(old_password, user.password_hash):
        raise BadRequest('old password incorrect')

    rounds = int(current_app.config['BCRYPT_ROUNDS'])
    with users.transaction():
        users.update_user(user.user_id,
                          password_hash=hash_password(new_password, rounds))
    logger.info('Changed password for user %s', user.user_id)
    return {'ok': True}, status.OK, {}
