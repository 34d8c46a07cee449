"""
Durable storage of user accounts.

All reads and writes go through the Flask-SQLAlchemy session bound to the
application. Mutations should happen inside :func:`transaction`, which commits
on success and rolls back on any exception.
"""

from typing import Generator, Optional, Any
from contextlib import contextmanager
from datetime import datetime
import logging

from pytz import UTC
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Boolean, Column, DateTime, Integer, String, text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.session import Session

from .. import domain
from . import exceptions

logger = logging.getLogger(__name__)

db: SQLAlchemy = SQLAlchemy()


def _now() -> datetime:
    return datetime.now(tz=UTC)


class DBUser(db.Model):  # type: ignore
    """
    User account table.

    +---------------+--------------+------+-----+---------+----------------+
    | Field         | Type         | Null | Key | Default | Extra          |
    +---------------+--------------+------+-----+---------+----------------+
    | id            | int          | NO   | PRI | NULL    | auto_increment |
    | email         | varchar(255) | NO   | UNI | NULL    |                |
    | password_hash | varchar(255) | NO   |     | NULL    |                |
    | verified      | tinyint(1)   | NO   |     | 0       |                |
    | created_at    | datetime     | NO   |     | NULL    |                |
    | updated_at    | datetime     | NO   |     | NULL    |                |
    +---------------+--------------+------+-----+---------+----------------+
    """

    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    verified = Column(Boolean, nullable=False, default=False,
                      server_default=text('0'))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now,
                        onupdate=_now)

    def to_domain(self) -> domain.User:
        """Get a :class:`.domain.User` from this row."""
        return domain.User(
            user_id=str(self.id),
            email=self.email,
            password_hash=self.password_hash,
            verified=bool(self.verified),
            created=self.created_at,
            updated=self.updated_at
        )


@contextmanager
def transaction() -> Generator[Session, None, None]:
    """
    Context manager for a database transaction.

    A unique-constraint violation is raised as :class:`.UserExists`; e-mail is
    the only unique column.
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as e:
        logger.debug('Integrity error, rolling back: %s', e)
        db.session.rollback()
        raise exceptions.UserExists('E-mail address already registered') from e
    except OperationalError as e:
        logger.error('Database unavailable, rolling back: %s', e)
        db.session.rollback()
        raise exceptions.Unavailable('Database unavailable') from e
    except Exception as e:
        logger.error('Transaction failed, rolling back: %s', str(e))
        db.session.rollback()
        raise


def init_app(app: Flask) -> None:
    """Set configuration defaults and attach the database to ``app``."""
    app.config.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')
    app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available() -> bool:
    """Check our connection to the database."""
    try:
        db.session.execute(text('SELECT 1'))
    except Exception as e:
        logger.error('Encountered an error talking to database: %s', e)
        return False
    return True


def _get(**criteria: Any) -> Optional[DBUser]:
    try:
        db_user: Optional[DBUser] = \
            db.session.query(DBUser).filter_by(**criteria).first()
    except OperationalError as e:
        raise exceptions.Unavailable(f'Database unavailable: {e}') from e
    return db_user


def get_user_by_email(email: str) -> Optional[domain.User]:
    """
    Load a user by normalized e-mail address.

    Parameters
    ----------
    email : str

    Returns
    -------
    :class:`.domain.User` or None

    """
    db_user = _get(email=email)
    return db_user.to_domain() if db_user is not None else None


def get_user_by_id(user_id: str) -> Optional[domain.User]:
    """Load a user by identifier."""
    try:
        pk = int(user_id)
    except (TypeError, ValueError):
        return None
    db_user = _get(id=pk)
    return db_user.to_domain() if db_user is not None else None


def create_user(email: str, password_hash: str) -> domain.User:
    """
    Add a new, unverified user.

    Should be called within :func:`transaction`; the row is flushed so that
    it gets an identifier, and is committed (or rolled back) with the rest of
    the transaction.

    Raises
    ------
    :class:`.UserExists`
        Raised if the address is already registered.

    """
    db_user = DBUser(email=email, password_hash=password_hash,
                     verified=False)
    try:
        db.session.add(db_user)
        db.session.flush()
    except IntegrityError as e:
        raise exceptions.UserExists(f'{email} is already registered') from e
    except SQLAlchemyError as e:
        raise exceptions.Unavailable(f'Could not create user: {e}') from e
    logger.debug('Created user %s', db_user.id)
    return db_user.to_domain()


def update_user(user_id: str, password_hash: Optional[str] = None,
                verified: Optional[bool] = None) -> domain.User:
    """
    Update the password hash and/or verified flag of a user.

    Should be called within :func:`transaction`.

    Raises
    ------
    :class:`.NoSuchUser`

    """
    db_user = _get(id=int(user_id))
    if db_user is None:
        raise exceptions.NoSuchUser(f'No user with id {user_id}')
    if password_hash is not None:
        db_user.password_hash = password_hash
    if verified is not None:
        db_user.verified = verified
    db_user.updated_at = _now()
    db.session.add(db_user)
    return db_user.to_domain()
