"""Flask configuration."""
import os

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')
"""Deployment environment. In ``production``, see :func:`check`."""

URL_PREFIX = os.environ.get('URL_PREFIX', '/api/auth')
"""Path under which the authentication routes are mounted."""

#################### Session tokens ####################
DEFAULT_JWT_SECRET = 'change_this_secret'

JWT_SECRET = os.environ.get('JWT_SECRET', DEFAULT_JWT_SECRET)
"""Secret used to sign session tokens. Must be set in production."""

JWT_EXPIRES_IN = os.environ.get('JWT_EXPIRES_IN', '1d')
"""Session token lifetime, in seconds or with an ``s``/``m``/``h``/``d``
suffix."""

TOKEN_TTL = int(os.environ.get('TOKEN_TTL_SECONDS', '86400'))
"""Lifetime of a revocation marker when the token's own expiry is unknown."""

#################### One-time codes ####################
VERIFICATION_CODE_TTL = int(
    os.environ.get('VERIFICATION_CODE_TTL_SECONDS', '600')
)
RESET_CODE_TTL = int(os.environ.get('RESET_CODE_TTL_SECONDS', '900'))

BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', '12'))
"""bcrypt cost factor for new password hashes."""

#################### Credential store ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URI',
                                         'sqlite:///userauth.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', '0')))
"""Create the tables on startup. Useful for dev and testing."""

#################### Code store ####################
REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_PASSWORD = os.environ.get('REDIS_PASSWORD', None)

REDIS_FAKE = os.environ.get('REDIS_FAKE', '').lower() in ('1', 'true')
"""Use the FakeRedis library instead of a redis service.

Useful for testing, dev, beta."""

#################### Mail ####################
SMTP_HOST = os.environ.get('SMTP_HOST', '')
SMTP_PORT = os.environ.get('SMTP_PORT', '465')
SMTP_USER = os.environ.get('SMTP_USER', '')
SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD', '')
SMTP_SECURE = os.environ.get('SMTP_SECURE', '').lower() in ('1', 'true')
"""Use implicit TLS; otherwise STARTTLS is used if the server offers it."""

MAIL_FROM = os.environ.get('MAIL_FROM', SMTP_USER)

#################### Logging ####################
LOGLEVEL = int(os.environ.get('LOGLEVEL', '20'))
LOG_JSON = bool(int(os.environ.get('LOG_JSON', '1')))
"""Write log records as JSON."""


def check(config: dict) -> None:
    """
    Refuse to start in production with unsafe or missing settings.

    Raises
    ------
    :class:`RuntimeError`

    """
    if config.get('ENVIRONMENT') != 'production':
        return
    secret = config.get('JWT_SECRET')
    if not secret or secret == DEFAULT_JWT_SECRET:
        raise RuntimeError('JWT_SECRET must be set in production')
    for key in ('SQLALCHEMY_DATABASE_URI', 'REDIS_HOST', 'SMTP_HOST'):
        if not config.get(key):
            raise RuntimeError(f'{key} must be set in production')
