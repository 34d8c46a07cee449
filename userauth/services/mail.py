"""Provides a unified API for sending one-time codes by e-mail."""

from typing import Optional
from email.message import EmailMessage
import logging
import smtplib

from flask import Flask, current_app, g
from retry import retry

from ..validation import validate_email
from .exceptions import DeliveryFailed

logger = logging.getLogger(__name__)

TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">{title}</h2>
  <p>Your {noun} is:</p>
  <div style="background: #f4f4f4; padding: 20px; text-align: center; font-size: 24px; font-weight: bold; letter-spacing: 5px; margin: 20px 0;">
    {code}
  </div>
  <p>This code expires in {minutes} minutes.</p>
  <p style="color: #666; font-size: 12px;">If you didn't request this code, please ignore this email.</p>
</div>
"""


class MailSession(object):
    """A session with an SMTP service; a connection is opened per message."""

    def __init__(self, host: str = '', port: int = 465, username: str = '',
                 password: str = '', secure: bool = False,
                 sender: Optional[str] = None, timeout: int = 20) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._secure = secure
        self._sender = sender or username
        self._timeout = timeout

    def _new_connection(self) -> smtplib.SMTP:
        if self._secure:
            return smtplib.SMTP_SSL(host=self._host, port=self._port,
                                    timeout=self._timeout)
        conn = smtplib.SMTP(host=self._host, port=self._port,
                            timeout=self._timeout)
        conn.ehlo()
        if conn.has_extn('starttls'):
            conn.starttls()
            conn.ehlo()
        return conn

    @retry((smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError),
           tries=3, delay=0.5, backoff=2)
    def _deliver(self, message: EmailMessage) -> None:
        with self._new_connection() as conn:
            if self._username:
                conn.login(self._username, self._password)
            conn.send_message(message)

    def send(self, to: str, subject: str, body: str,
             html: Optional[str] = None) -> None:
        """
        Send a message to a single recipient.

        Raises
        ------
        :class:`.DeliveryFailed`
            Raised if the message could not be handed to the SMTP service.

        """
        if not self._host:
            raise DeliveryFailed('SMTP host is not configured')
        if not validate_email(to):
            raise DeliveryFailed('Invalid email format')

        message = EmailMessage()
        message['From'] = self._sender
        message['To'] = to
        message['Subject'] = subject
        message.set_content(body)
        if html is not None:
            message.add_alternative(html, subtype='html')
        try:
            self._deliver(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryFailed(f'Failed to send: {e}') from e
        logger.debug('Sent "%s" message', subject)

    def send_verification_code(self, to: str, code: str, ttl: int) -> None:
        """Send a registration verification code."""
        minutes = ttl // 60
        self.send(
            to, 'Your verification code',
            f'Your verification code is: {code}. '
            f'It expires in {minutes} minutes.',
            TEMPLATE.format(title='Verification Code',
                            noun='verification code', code=code,
                            minutes=minutes)
        )

    def send_reset_code(self, to: str, code: str, ttl: int) -> None:
        """Send a password reset code."""
        minutes = ttl // 60
        self.send(
            to, 'Your password reset code',
            f'Your password reset code is: {code}. '
            f'It expires in {minutes} minutes.',
            TEMPLATE.format(title='Password Reset Code',
                            noun='password reset code', code=code,
                            minutes=minutes)
        )


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('SMTP_HOST', '')
    app.config.setdefault('SMTP_PORT', '465')
    app.config.setdefault('SMTP_USER', '')
    app.config.setdefault('SMTP_PASSWORD', '')
    app.config.setdefault('SMTP_SECURE', False)
    app.config.setdefault('MAIL_FROM', None)


def get_mailer(app: Flask) -> MailSession:
    """Get a new :class:`.MailSession` configured for ``app``."""
    config = app.config
    return MailSession(
        host=config.get('SMTP_HOST', ''),
        port=int(config.get('SMTP_PORT', '465')),
        username=config.get('SMTP_USER', ''),
        password=config.get('SMTP_PASSWORD', ''),
        secure=bool(config.get('SMTP_SECURE', False)),
        sender=config.get('MAIL_FROM')
    )


def current_mailer() -> MailSession:
    """Get/create :class:`.MailSession` for this context."""
    shared: Optional[MailSession] = \
        current_app.extensions.get('userauth.mailer')
    if shared is not None:
        return shared
    if 'mailer' not in g:
        g.mailer = get_mailer(current_app)
    return g.mailer  # type: ignore
