"""
Internal service API for the ephemeral code and token store.

One-time codes and token revocation markers live in a single flat redis
namespace, and expire through redis TTLs:

- ``verif_{email}``: registration verification code.
- ``reset_{email}``: password reset code.
- ``black_{jti}``: revocation marker for a session token.
"""

from typing import Optional
import logging

from flask import Flask, current_app, g
import redis

from .. import domain
from .exceptions import StoreUnavailable, StoreWriteFailed

logger = logging.getLogger(__name__)

REVOKED = '1'
CONSUMED = 'consumed'
"""Written over a consumed code when it cannot be deleted."""


def code_key(purpose: domain.Purpose, email: str) -> str:
    """Key under which the code for ``purpose`` and ``email`` is stored."""
    return f'{purpose.value}_{email}'


def revocation_key(jti: str) -> str:
    """Key of the revocation marker for token ``jti``."""
    return f'black_{jti}'


class CodeStore(object):
    """
    Manages a connection to Redis.

    The redis client is thread safe, and connections are attached at the time
    a command is executed. This class simply provides a container for
    configuration, and maps redis errors onto service exceptions.
    """

    def __init__(self, host: str = 'localhost', port: int = 6379,
                 db: int = 0, password: Optional[str] = None,
                 fake: bool = False) -> None:
        """Open the connection to Redis."""
        if fake:
            import fakeredis
            logger.debug('Using fakeredis for the code store')
            self.r = fakeredis.FakeStrictRedis(server=fakeredis.FakeServer(),
                                               decode_responses=True)
        else:
            logger.debug('New Redis connection at %s, port %s', host, port)
            self.r = redis.StrictRedis(host=host, port=port, db=db,
                                       password=password,
                                       decode_responses=True)

    def set(self, key: str, value: str, ttl: int) -> None:
        """
        Store ``value`` under ``key``, expiring after ``ttl`` seconds.

        Raises
        ------
        :class:`.StoreWriteFailed`

        """
        try:
            self.r.set(key, value, ex=int(ttl))
        except redis.exceptions.ConnectionError as e:
            raise StoreWriteFailed(f'Connection failed: {e}') from e
        except Exception as e:
            raise StoreWriteFailed(f'Failed to store: {e}') from e

    def get(self, key: str) -> Optional[str]:
        """
        Get the value stored under ``key``, if any.

        Raises
        ------
        :class:`.StoreUnavailable`

        """
        try:
            value: Optional[str] = self.r.get(key)
        except redis.exceptions.ConnectionError as e:
            raise StoreUnavailable(f'Connection failed: {e}') from e
        except Exception as e:
            raise StoreUnavailable(f'Failed to read: {e}') from e
        return value

    def delete(self, key: str) -> None:
        """
        Delete ``key`` from the store.

        Raises
        ------
        :class:`.StoreWriteFailed`

        """
        try:
            self.r.delete(key)
        except redis.exceptions.ConnectionError as e:
            raise StoreWriteFailed(f'Connection failed: {e}') from e
        except Exception as e:
            raise StoreWriteFailed(f'Failed to delete: {e}') from e

    def put_code(self, purpose: domain.Purpose, email: str, code: str,
                 ttl: int) -> None:
        """Store a one-time code, replacing any live code for the same use."""
        self.set(code_key(purpose, email), code, ttl)

    def get_code(self, purpose: domain.Purpose, email: str) -> Optional[str]:
        """Get the live one-time code for ``purpose`` and ``email``."""
        return self.get(code_key(purpose, email))

    def discard_code(self, purpose: domain.Purpose,
                     email: str) -> domain.Outcome:
        """
        Remove a consumed code, without raising.

        If the key cannot be deleted, the value is replaced by a non-numeric
        marker (keeping its TTL) so that the code can no longer match.
        """
        key = code_key(purpose, email)
        try:
            self.delete(key)
            return domain.Outcome.SUCCEEDED
        except StoreWriteFailed as e:
            logger.error('Could not delete %s code: %s', purpose.value, e)
        try:
            self.r.set(key, CONSUMED, xx=True, keepttl=True)
        except Exception as e:
            logger.error('Could not mark %s code as consumed: %s',
                         purpose.value, e)
        return domain.Outcome.FAILED

    def revoke(self, jti: str, ttl: int) -> domain.Outcome:
        """Write a revocation marker for token ``jti``, without raising."""
        try:
            self.set(revocation_key(jti), REVOKED, ttl)
        except StoreWriteFailed as e:
            logger.error('Could not revoke token: %s', e)
            return domain.Outcome.FAILED
        return domain.Outcome.SUCCEEDED

    def is_revoked(self, jti: str) -> bool:
        """
        Determine whether token ``jti`` has been revoked.

        Raises
        ------
        :class:`.StoreUnavailable`

        """
        return bool(self.get(revocation_key(jti)))

    def is_available(self) -> bool:
        """Check our connection to redis."""
        try:
            return bool(self.r.ping())
        except Exception as e:
            logger.error('Encountered an error talking to redis: %s', e)
            return False


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('REDIS_HOST', 'localhost')
    app.config.setdefault('REDIS_PORT', '6379')
    app.config.setdefault('REDIS_DATABASE', '0')
    app.config.setdefault('REDIS_PASSWORD', None)
    app.config.setdefault('REDIS_FAKE', False)
    if app.config['REDIS_FAKE']:
        # A fake server lives only as long as its client; keep one per app.
        app.extensions['userauth.store'] = get_store(app)


def get_store(app: Flask) -> CodeStore:
    """Get a new connection to the code store."""
    config = app.config
    return CodeStore(
        host=config.get('REDIS_HOST', 'localhost'),
        port=int(config.get('REDIS_PORT', '6379')),
        db=int(config.get('REDIS_DATABASE', '0')),
        password=config.get('REDIS_PASSWORD'),
        fake=bool(config.get('REDIS_FAKE', False))
    )


def current_store() -> CodeStore:
    """Get/create :class:`.CodeStore` for this context."""
    shared: Optional[CodeStore] = \
        current_app.extensions.get('userauth.store')
    if shared is not None:
        return shared
    if 'store' not in g:
        g.store = get_store(current_app)
    return g.store  # type: ignore
