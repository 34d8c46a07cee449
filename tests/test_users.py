"""Tests for :mod:`userauth.services.users`."""

from unittest import TestCase, mock

from flask import Flask
from sqlalchemy.exc import OperationalError

from userauth.passwords import check_password, hash_password
from userauth.services import users
from userauth.services.exceptions import NoSuchUser, Unavailable, UserExists


class TestUsers(TestCase):
    """Read and write user accounts."""

    def setUp(self):
        self.app = Flask('test')
        self.app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
        users.init_app(self.app)
        self.context = self.app.app_context()
        self.context.push()
        users.create_all()

    def tearDown(self):
        users.drop_all()
        self.context.pop()

    def test_create(self):
        """New users are unverified."""
        with users.transaction():
            user = users.create_user('joe@bloggs.com', hash_password('x' * 6, 4))
        self.assertFalse(user.verified)
        self.assertIsNotNone(user.created)

        loaded = users.get_user_by_email('joe@bloggs.com')
        self.assertEqual(loaded.user_id, user.user_id)
        self.assertTrue(check_password('x' * 6, loaded.password_hash))
        self.assertEqual(users.get_user_by_id(user.user_id).email,
                         'joe@bloggs.com')

    def test_not_found(self):
        self.assertIsNone(users.get_user_by_email('nobody@bloggs.com'))
        self.assertIsNone(users.get_user_by_id('42'))
        self.assertIsNone(users.get_user_by_id('notanid'))

    def test_duplicate(self):
        """An address can only be registered once."""
        with users.transaction():
            users.create_user('joe@bloggs.com', 'hash')
        with self.assertRaises(UserExists):
            with users.transaction():
                users.create_user('joe@bloggs.com', 'otherhash')
        self.assertEqual(users.get_user_by_email('joe@bloggs.com')
                         .password_hash, 'hash')

    def test_rollback(self):
        """Nothing is written if the transaction fails."""
        with self.assertRaises(RuntimeError):
            with users.transaction():
                users.create_user('joe@bloggs.com', 'hash')
                raise RuntimeError('nope')
        self.assertIsNone(users.get_user_by_email('joe@bloggs.com'))

    def test_update(self):
        with users.transaction():
            user = users.create_user('joe@bloggs.com', 'hash')
        with users.transaction():
            users.update_user(user.user_id, verified=True)
        with users.transaction():
            users.update_user(user.user_id, password_hash='newhash')
        loaded = users.get_user_by_email('joe@bloggs.com')
        self.assertTrue(loaded.verified)
        self.assertEqual(loaded.password_hash, 'newhash')

    def test_update_missing(self):
        with self.assertRaises(NoSuchUser):
            with users.transaction():
                users.update_user('42', verified=True)

    def test_unavailable(self):
        """Driver errors are raised as :class:`.Unavailable`."""
        error = OperationalError('SELECT', {}, Exception('gone away'))
        with mock.patch.object(users.db.session, 'query') as mock_query:
            mock_query.side_effect = error
            with self.assertRaises(Unavailable):
                users.get_user_by_email('joe@bloggs.com')

    def test_is_available(self):
        self.assertTrue(users.is_available())
        with mock.patch.object(users.db.session, 'execute') as mock_execute:
            mock_execute.side_effect = OperationalError('SELECT 1', {},
                                                        Exception('down'))
            self.assertFalse(users.is_available())
