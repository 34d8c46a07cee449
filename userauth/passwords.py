"""Password hashing with bcrypt."""

import logging

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72
"""bcrypt only considers the first 72 bytes of a password."""


def _to_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Generate a salted bcrypt hash of a password."""
    if not password:
        raise ValueError('Password cannot be empty')
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_to_bytes(password), salt).decode('ascii')


def check_password(password: str, encrypted: str) -> bool:
    """Check a password against a bcrypt hash."""
    if not password or not encrypted:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(password), encrypted.encode('ascii'))
    except ValueError as e:
        logger.error('Stored password hash is malformed: %s', e)
        return False
