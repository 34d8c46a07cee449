"""
Create a user in the credential store, bypassing e-mail verification.

.. code-block:: bash

   $ CREATE_DB=1 DATABASE_URI=sqlite:///userauth.db \
        python create_user.py --email joe@bloggs.com --verified

"""

import click

from userauth import validation
from userauth.factory import create_web_app
from userauth.passwords import hash_password
from userauth.services import users
from userauth.services.exceptions import UserExists


@click.command()
@click.option('--email', prompt='Email address')
@click.option('--password', prompt=True, hide_input=True,
              confirmation_prompt=True)
@click.option('--verified/--unverified', default=False,
              help='Mark the e-mail address as already verified')
def create_user(email: str, password: str, verified: bool) -> None:
    """Add a user with ``email`` and ``password``."""
    email = validation.normalize_email(email)
    if not validation.validate_email(email):
        raise click.BadParameter('invalid email format', param_hint='email')
    if not validation.validate_password(password):
        raise click.BadParameter('password must be at least 6 characters',
                                 param_hint='password')

    app = create_web_app()
    with app.app_context():
        password_hash = hash_password(password, app.config['BCRYPT_ROUNDS'])
        try:
            with users.transaction():
                user = users.create_user(email, password_hash)
                if verified:
                    user = users.update_user(user.user_id, verified=True)
        except UserExists:
            raise click.ClickException(f'{email} is already registered')
    click.echo(f'Created user {user.user_id} ({user.email})')


if __name__ == '__main__':
    create_user()
