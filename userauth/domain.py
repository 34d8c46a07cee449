"""Defines user and session concepts for the authentication service."""

from typing import Any, NamedTuple, Optional
from datetime import datetime
from enum import Enum


class User(NamedTuple):
    """A registered user account, as held by the credential store."""

    user_id: str
    """Unique identifier of the user."""

    email: str
    """Normalized (trimmed, lower-cased) e-mail address."""

    password_hash: str
    """Opaque bcrypt hash of the user's password."""

    verified: bool = False
    """Whether the user has confirmed their e-mail address."""

    created: Optional[datetime] = None
    updated: Optional[datetime] = None


class Claims(NamedTuple):
    """Claims carried by a signed session token."""

    sub: str
    """Identifier of the user to whom the token was issued."""

    email: str
    jti: Optional[str] = None
    """Unique token identifier; the key for revocation."""

    iat: Optional[int] = None
    exp: Optional[int] = None

    @property
    def user_id(self) -> str:
        """The authenticated user's identifier."""
        return self.sub


class Purpose(Enum):
    """Purposes for which a one-time code can be issued."""

    VERIFICATION = 'verif'
    RESET = 'reset'


class Outcome(Enum):
    """Result of a best-effort operation whose failure is not fatal."""

    SUCCEEDED = 'succeeded'
    FAILED = 'failed'

    def __bool__(self) -> bool:
        return self is Outcome.SUCCEEDED


def to_dict(claims: Claims) -> dict:
    """Generate a dict of claims suitable for encoding, omitting nulls."""
    return {key: value for key, value in claims._asdict().items()
            if value is not None}


def from_dict(data: dict) -> Claims:
    """Instantiate :class:`.Claims` from decoded token data."""
    fields: Any = {key: data.get(key) for key in Claims._fields}
    return Claims(**fields)
