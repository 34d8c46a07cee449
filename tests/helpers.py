"""Shared setup for tests that drive the application."""

from typing import Optional, Tuple
from unittest import mock

from flask import Flask

from userauth import domain
from userauth.factory import create_web_app
from userauth.passwords import hash_password
from userauth.services import users
from userauth.services.mail import MailSession
from userauth.services.store import CodeStore

SECRET = 'foosecret'
PREFIX = '/api/auth'


def create_test_app(**overrides) -> Flask:
    """Build an app with an in-memory database, fake redis and fake mail."""
    config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'CREATE_DB': True,
        'REDIS_FAKE': True,
        'BCRYPT_ROUNDS': 4,
        'JWT_SECRET': SECRET,
        'LOG_JSON': False,
        'ENVIRONMENT': 'development',
        'URL_PREFIX': PREFIX
    }
    config.update(overrides)
    app = create_web_app(config)
    app.extensions['userauth.mailer'] = mock.MagicMock(spec=MailSession)
    return app


def get_store(app: Flask) -> CodeStore:
    """The fake code store shared by all requests to ``app``."""
    return app.extensions['userauth.store']


def get_mailer(app: Flask) -> mock.MagicMock:
    return app.extensions['userauth.mailer']


def add_user(app: Flask, email: str, password: str,
             verified: bool = True) -> domain.User:
    """Put a user straight into the credential store."""
    with app.app_context():
        with users.transaction():
            user = users.create_user(email, hash_password(password, 4))
            if verified:
                user = users.update_user(user.user_id, verified=True)
    return user


def load_user(app: Flask, email: str) -> Optional[domain.User]:
    with app.app_context():
        return users.get_user_by_email(email)


def login(client, email: str, password: str) -> Tuple[int, dict]:
    response = client.post(f'{PREFIX}/login',
                           json={'email': email, 'password': password})
    return response.status_code, response.get_json()


def bearer(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}
