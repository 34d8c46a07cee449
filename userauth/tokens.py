"""Functions for issuing and verifying signed session tokens."""

from typing import Optional, Tuple, Union
from datetime import datetime
import re
import uuid

from pytz import UTC
import jwt

from . import domain

ALGORITHM = 'HS256'

_DURATION = re.compile(r'^\s*(\d+)\s*([smhd]?)\s*$')
_UNITS = {'': 1, 's': 1, 'm': 60, 'h': 3600, 'd': 86400}


class InvalidToken(ValueError):
    """Token is malformed, or its signature does not check out."""


class ExpiredToken(InvalidToken):
    """Token signature is valid, but the token has expired."""


def parse_duration(value: Union[str, int]) -> int:
    """
    Convert a duration such as ``3600``, ``'90m'`` or ``'1d'`` to seconds.

    Raises
    ------
    :class:`ValueError`
        Raised if the value is not a recognized duration.

    """
    if isinstance(value, int):
        return value
    match = _DURATION.match(str(value).lower())
    if match is None:
        raise ValueError(f'Not a valid duration: {value!r}')
    amount, unit = match.groups()
    return int(amount) * _UNITS[unit]


def now() -> int:
    """Get the current UNIX time."""
    return int(datetime.now(tz=UTC).timestamp())


def issue(user: domain.User, secret: str,
          expires_in: Union[str, int]) -> Tuple[str, domain.Claims]:
    """
    Mint a new session token for ``user``, with a fresh token identifier.

    Parameters
    ----------
    user : :class:`.domain.User`
    secret : str
        Signing secret.
    expires_in : str or int
        Token lifetime; see :func:`parse_duration`.

    Returns
    -------
    str
        The encoded token.
    :class:`.domain.Claims`
        The claims carried by the token.

    """
    issued_at = now()
    claims = domain.Claims(
        sub=str(user.user_id),
        email=user.email,
        jti=str(uuid.uuid4()),
        iat=issued_at,
        exp=issued_at + parse_duration(expires_in)
    )
    return encode(claims, secret), claims


def encode(claims: domain.Claims, secret: str) -> str:
    """Sign ``claims`` as a JWT."""
    return jwt.encode(domain.to_dict(claims), secret, algorithm=ALGORITHM)


def decode(token: str, secret: str, verify_expiry: bool = True,
           require_identity: bool = True) -> domain.Claims:
    """
    Verify a token and get its claims.

    Parameters
    ----------
    token : str
    secret : str
    verify_expiry : bool
        If ``False``, an expired token with a valid signature is still
        accepted. Used at logout, so that expired tokens can be revoked too.
    require_identity : bool
        If ``False``, the ``sub`` and ``email`` claims may be absent. Used at
        logout, where a valid signature is enough to revoke a token.

    Raises
    ------
    :class:`ExpiredToken`
        The token has expired (only when ``verify_expiry`` is set).
    :class:`InvalidToken`
        The token is malformed or the signature is not valid.

    """
    try:
        data: dict = jwt.decode(token, secret, algorithms=[ALGORITHM],
                                options={'verify_exp': verify_expiry})
    except jwt.exceptions.ExpiredSignatureError as e:
        raise ExpiredToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise InvalidToken('Not a valid token') from e
    if require_identity and ('sub' not in data or 'email' not in data):
        raise InvalidToken('Token payload malformed')
    return domain.from_dict(data)


def remaining_lifetime(claims: domain.Claims,
                       at: Optional[int] = None) -> Optional[int]:
    """Seconds until the token expires, or ``None`` if unknown or elapsed."""
    if claims.exp is None:
        return None
    remaining = int(claims.exp) - (now() if at is None else at)
    return remaining if remaining > 0 else None


def parse_bearer(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header or not header.startswith('Bearer '):
        return None
    token = header[len('Bearer '):].strip()
    return token or None
