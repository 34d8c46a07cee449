"""
Authenticates requests that carry a bearer session token.

Use :func:`authenticated` to protect a route; the verified claims are attached
to the request as ``request.auth``.

.. code-block:: python

   @blueprint.route('/password', methods=['PUT'])
   @authenticated
   def change_password():
       claims = request.auth
       ...

"""

from typing import Any, Callable, Optional
from functools import wraps
import logging

from flask import current_app, request
from werkzeug.exceptions import Unauthorized

from . import domain, tokens
from .services.exceptions import StoreUnavailable
from .services.store import CodeStore, current_store

logger = logging.getLogger(__name__)


def authenticate(header: Optional[str], secret: str,
                 store: CodeStore) -> domain.Claims:
    """
    Verify the bearer token in an ``Authorization`` header.

    If the revocation marker cannot be looked up, the error is logged and the
    token is accepted.

    Parameters
    ----------
    header : str or None
        Value of the ``Authorization`` header.
    secret : str
        Token signing secret.
    store : :class:`.CodeStore`
        Where revocation markers are kept.

    Returns
    -------
    :class:`.domain.Claims`

    Raises
    ------
    :class:`Unauthorized`

    """
    token = tokens.parse_bearer(header)
    if token is None:
        raise Unauthorized('Unauthorized')
    try:
        claims = tokens.decode(token, secret)
    except tokens.ExpiredToken as e:
        raise Unauthorized('token expired') from e
    except tokens.InvalidToken as e:
        raise Unauthorized('invalid token') from e
    if not claims.jti:
        raise Unauthorized('malformed token')

    try:
        revoked = store.is_revoked(claims.jti)
    except StoreUnavailable as e:
        logger.error('Could not check revocation of token %s: %s',
                     claims.jti, e)
        revoked = False
    if revoked:
        raise Unauthorized('token revoked')
    return claims


def authenticated(func: Callable) -> Callable:
    """Decorate a route so that it requires a valid session token."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        request.auth = authenticate(request.headers.get('Authorization'),
                                    current_app.config['JWT_SECRET'],
                                    current_store())
        return func(*args, **kwargs)
    return wrapper
