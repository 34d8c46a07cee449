"""
User account authentication service.

The service is a Flask application that provides a JSON API for account
registration with e-mail verification, login, logout, and password reset and
change. It is the primary repository for user credentials.

Registration and password reset are mediated by short-lived numeric codes.
A code is generated for a given purpose and address, stored in the
distributed key-value store (redis) with an expiry, and sent to the user by
e-mail. Presenting the code back to the service proves control of the
address. At most one code is live per purpose and address; requesting a new
one replaces the old.

When a user logs in, they are issued a signed bearer token (JWT) carrying
their user id, e-mail address, and a unique token identifier (``jti``). The
token is not stored anywhere. On logout, a revocation marker is written to
the key-value store under the token identifier, and lives for the rest of the
token's lifetime; the auth guard (see :mod:`userauth.guard`) rejects any
token that has a marker.

User records live in a relational database (see
:mod:`userauth.services.users`). Mutations of a user record happen inside a
database transaction. Registration additionally folds the write of the
verification code into the same transaction, so that a user is never created
without an outstanding code.
"""
