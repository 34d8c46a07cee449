"""
Helper script for issuing a session token for an existing user.

Be sure that you are using the same secret when running this script as when you
run the app. Set ``JWT_SECRET=somesecret`` in your environment to ensure that
the same secret is always used.

.. code-block:: bash

   $ JWT_SECRET=foosecret DATABASE_URI=sqlite:///userauth.db \
        python generate_token.py --email joe@bloggs.com
   eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9...

Use the token in requests to authenticated endpoints, in the header
``Authorization: Bearer [token]``.
"""

import click

from userauth import tokens
from userauth.factory import create_web_app
from userauth.services import users
from userauth.validation import normalize_email


@click.command()
@click.option('--email', prompt='Email address')
@click.option('--expires_in', default=None,
              help='Token lifetime, e.g. 3600 or 2h (default JWT_EXPIRES_IN)')
def generate_token(email: str, expires_in: str) -> None:
    """Issue a token for the user registered with ``email``."""
    app = create_web_app()
    with app.app_context():
        user = users.get_user_by_email(normalize_email(email))
        if user is None:
            raise click.ClickException(f'No user registered as {email}')
        if not user.verified:
            click.echo('Warning: user has not verified their email', err=True)
        token, _ = tokens.issue(user, app.config['JWT_SECRET'],
                                expires_in or app.config['JWT_EXPIRES_IN'])
    click.echo(token)


if __name__ == '__main__':
    generate_token()
