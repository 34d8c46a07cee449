"""Tests for logging in and out, via the JSON API."""

from unittest import TestCase, mock

import jwt

from userauth import tokens
from userauth.services.exceptions import StoreWriteFailed, Unavailable
from userauth.services import users
from userauth.services.store import CodeStore

from .helpers import PREFIX, SECRET, create_test_app, get_store, add_user, \
    login, bearer

EMAIL = 'joe@bloggs.com'
PASSWORD = 'foopass'


class TestLogin(TestCase):
    """POST /login issues a session token."""

    def setUp(self):
        self.app = create_test_app()
        self.client = self.app.test_client()
        self.user = add_user(self.app, EMAIL, PASSWORD)

    def test_login(self):
        status, data = login(self.client, ' Joe@Bloggs.com', PASSWORD)
        self.assertEqual(status, 200)
        claims = tokens.decode(data['token'], SECRET)
        self.assertEqual(claims.user_id, self.user.user_id)
        self.assertEqual(claims.email, EMAIL)
        self.assertIsNotNone(claims.jti)
        self.assertEqual(claims.exp - claims.iat, 86400)

    def test_fresh_jti(self):
        """Each login gets its own token identifier."""
        _, first = login(self.client, EMAIL, PASSWORD)
        _, second = login(self.client, EMAIL, PASSWORD)
        self.assertNotEqual(tokens.decode(first['token'], SECRET).jti,
                            tokens.decode(second['token'], SECRET).jti)

    def test_bad_credentials(self):
        """Unknown address and wrong password cannot be told apart."""
        unknown = self.client.post(f'{PREFIX}/login',
                                   json={'email': 'jane@bloggs.com',
                                         'password': PASSWORD})
        wrong = self.client.post(f'{PREFIX}/login',
                                 json={'email': EMAIL,
                                       'password': 'notmypass'})
        self.assertEqual(unknown.status_code, 400)
        self.assertEqual(wrong.status_code, 400)
        self.assertEqual(unknown.data, wrong.data)
        self.assertEqual(wrong.get_json(), {'error': 'invalid credentials'})

    def test_password_not_a_string(self):
        status, data = login(self.client, EMAIL, 1234567)
        self.assertEqual(status, 400)
        self.assertEqual(data, {'error': 'invalid credentials'})

    def test_invalid(self):
        status, data = login(self.client, EMAIL, '')
        self.assertEqual((status, data),
                         (400, {'error': 'email and password required'}))
        status, data = login(self.client, 'joe', PASSWORD)
        self.assertEqual((status, data),
                         (400, {'error': 'invalid email format'}))

    @mock.patch('time.sleep')
    def test_database_down(self, mock_sleep):
        """The lookup is retried, and then the request fails."""
        with mock.patch.object(users, 'get_user_by_email') as mock_get:
            mock_get.side_effect = Unavailable('down')
            status, data = login(self.client, EMAIL, PASSWORD)
        self.assertEqual(mock_get.call_count, 3)
        self.assertEqual(status, 500)
        self.assertEqual(data, {'error': 'internal server error'})


class TestLogout(TestCase):
    """POST /logout revokes the session token."""

    def setUp(self):
        self.app = create_test_app()
        self.client = self.app.test_client()
        self.user = add_user(self.app, EMAIL, PASSWORD)
        self.token, self.claims = tokens.issue(self.user, SECRET, '1h')

    def logout(self, headers=None):
        return self.client.post(f'{PREFIX}/logout', headers=headers or {})

    def test_logout(self):
        """The token is revoked for the rest of its lifetime."""
        response = self.logout(bearer(self.token))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'ok': True})
        store = get_store(self.app)
        self.assertTrue(store.is_revoked(self.claims.jti))
        self.assertTrue(0 < store.r.ttl(f'black_{self.claims.jti}') <= 3600)

    def test_expired_token(self):
        """Expired tokens can be revoked; the marker lives for TOKEN_TTL."""
        token = tokens.encode(self.claims._replace(exp=tokens.now() - 10),
                              SECRET)
        response = self.logout(bearer(token))
        self.assertEqual(response.status_code, 200)
        ttl = get_store(self.app).r.ttl(f'black_{self.claims.jti}')
        self.assertTrue(3600 < ttl <= 86400)

    def test_no_token(self):
        for headers in [None, {'Authorization': self.token},
                        {'Authorization': 'Bearer '}]:
            response = self.logout(headers)
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.get_json(), {'error': 'Unauthorized'})

    def test_bad_token(self):
        token = tokens.encode(self.claims, 'othersecret')
        for value in ['foo', token]:
            response = self.logout(bearer(value))
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.get_json(),
                             {'error': 'invalid or expired token'})

    def test_no_jti(self):
        token = tokens.encode(self.claims._replace(jti=None), SECRET)
        response = self.logout(bearer(token))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json(), {'error': 'invalid token'})

    def test_no_identity_claims(self):
        """Any signed token with a jti can be revoked."""
        token = jwt.encode({'sub': '1', 'jti': 'abc',
                            'exp': tokens.now() + 100},
                           SECRET, algorithm='HS256')
        response = self.logout(bearer(token))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'ok': True})
        self.assertTrue(get_store(self.app).is_revoked('abc'))

    def test_store_down(self):
        """Failing to write the marker does not fail the logout."""
        with mock.patch.object(CodeStore, 'set') as mock_set:
            mock_set.side_effect = StoreWriteFailed('down')
            response = self.logout(bearer(self.token))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(get_store(self.app).is_revoked(self.claims.jti))

    def test_logout_then_use(self):
        """A revoked token is refused by authenticated routes."""
        self.logout(bearer(self.token))
        response = self.client.put(f'{PREFIX}/password',
                                   json={'oldPassword': PASSWORD,
                                         'newPassword': 'newpass'},
                                   headers=bearer(self.token))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json(), {'error': 'token revoked'})
