"""Helpers shared by the request controllers."""

from typing import Any, Optional, Tuple
import logging
import secrets

from retry import retry
from werkzeug.exceptions import BadRequest, InternalServerError

from .. import domain, validation
from ..services import users
from ..services.exceptions import StoreUnavailable, Unavailable
from ..services.store import CodeStore

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]

CODE_LENGTH = 6

INVALID_EMAIL = 'invalid email format'
PASSWORD_TOO_SHORT = 'password must be at least 6 characters'
INVALID_CODE_FORMAT = 'invalid code format'
CODE_NOT_FOUND = 'code expired or not found'
INVALID_CODE = 'invalid code'
USER_NOT_FOUND = 'user not found'


def require(params: dict, *fields: str) -> None:
    """Raise :class:`BadRequest` if any of ``fields`` is missing."""
    if any(validation.is_missing(params.get(field)) for field in fields):
        if len(fields) == 1:
            message = f'{fields[0]} required'
        else:
            message = f'{", ".join(fields[:-1])} and {fields[-1]} required'
        raise BadRequest(message)


def clean_email(value: Any) -> str:
    """Normalize an e-mail address, and reject it if it is malformed."""
    email = validation.normalize_email(value)
    if not validation.validate_email(email):
        raise BadRequest(INVALID_EMAIL)
    return str(email)


def clean_code(value: Any) -> str:
    """Trim a one-time code, and reject it if it is not six digits."""
    if not validation.validate_code_format(value):
        raise BadRequest(INVALID_CODE_FORMAT)
    return str(value).strip()


def check_code(store: CodeStore, purpose: domain.Purpose, email: str,
               code: str, unavailable: str) -> None:
    """
    Compare ``code`` with the live code for ``purpose`` and ``email``.

    The stored code is left in place; the caller discards it once it has been
    used.

    Raises
    ------
    :class:`InternalServerError`
        The store could not be read; ``unavailable`` is the message.
    :class:`BadRequest`
        There is no live code, or it does not match.

    """
    try:
        saved = store.get_code(purpose, email)
    except StoreUnavailable as e:
        logger.error('Could not read %s code: %s', purpose.value, e)
        raise InternalServerError(unavailable) from e
    if not saved:
        raise BadRequest(CODE_NOT_FOUND)
    if not secrets.compare_digest(saved.encode('utf-8'),
                                  code.encode('utf-8')):
        raise BadRequest(INVALID_CODE)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def load_user_by_email(email: str) -> Optional[domain.User]:
    """Load a user by e-mail, retrying if the database is unavailable."""
    return users.get_user_by_email(email)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def load_user_by_id(user_id: str) -> Optional[domain.User]:
    """Load a user by identifier, retrying if the database is unavailable."""
    return users.get_user_by_id(user_id)
