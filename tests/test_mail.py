"""Tests for :mod:`userauth.services.mail`."""

from unittest import TestCase, mock
import smtplib

from flask import Flask

from userauth.services import mail
from userauth.services.exceptions import DeliveryFailed


class TestSend(TestCase):
    """Send messages through SMTP."""

    def setUp(self):
        self.mailer = mail.MailSession(host='smtp.bloggs.com', port=587,
                                       username='noreply@bloggs.com',
                                       password='pw')

    @mock.patch(f'{mail.__name__}.smtplib.SMTP')
    def test_send_verification_code(self, mock_SMTP):
        """The message names the code and its lifetime, in text and HTML."""
        conn = mock_SMTP.return_value
        conn.__enter__.return_value = conn
        self.mailer.send_verification_code('joe@bloggs.com', '123456', 600)

        mock_SMTP.assert_called_once_with(host='smtp.bloggs.com', port=587,
                                          timeout=20)
        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with('noreply@bloggs.com', 'pw')
        message = conn.send_message.call_args[0][0]
        self.assertEqual(message['To'], 'joe@bloggs.com')
        self.assertEqual(message['From'], 'noreply@bloggs.com')
        self.assertEqual(message['Subject'], 'Your verification code')
        text = message.get_body(('plain',)).get_content()
        self.assertIn('123456', text)
        self.assertIn('10 minutes', text)
        html = message.get_body(('html',)).get_content()
        self.assertIn('123456', html)

    @mock.patch(f'{mail.__name__}.smtplib.SMTP_SSL')
    def test_send_reset_code_secure(self, mock_SMTP_SSL):
        """With ``secure``, implicit TLS is used."""
        mailer = mail.MailSession(host='smtp.bloggs.com', secure=True,
                                  sender='Bloggs <noreply@bloggs.com>')
        conn = mock_SMTP_SSL.return_value
        conn.__enter__.return_value = conn
        mailer.send_reset_code('joe@bloggs.com', '654321', 900)

        mock_SMTP_SSL.assert_called_once_with(host='smtp.bloggs.com',
                                              port=465, timeout=20)
        conn.login.assert_not_called()
        message = conn.send_message.call_args[0][0]
        self.assertEqual(message['Subject'], 'Your password reset code')
        self.assertIn('15 minutes', message.get_body(('plain',)).get_content())

    def test_not_configured(self):
        with self.assertRaises(DeliveryFailed):
            mail.MailSession().send('joe@bloggs.com', 'Hi', 'Hello')

    @mock.patch(f'{mail.__name__}.smtplib.SMTP')
    def test_invalid_address(self, mock_SMTP):
        """Malformed recipient addresses are refused without connecting."""
        with self.assertRaises(DeliveryFailed):
            self.mailer.send('joe', 'Hi', 'Hello')
        mock_SMTP.assert_not_called()

    @mock.patch('time.sleep')
    @mock.patch(f'{mail.__name__}.smtplib.SMTP')
    def test_disconnected(self, mock_SMTP, mock_sleep):
        """Dropped connections are retried, then reported."""
        mock_SMTP.side_effect = smtplib.SMTPServerDisconnected('bye')
        with self.assertRaises(DeliveryFailed):
            self.mailer.send('joe@bloggs.com', 'Hi', 'Hello')
        self.assertEqual(mock_SMTP.call_count, 3)

    @mock.patch(f'{mail.__name__}.smtplib.SMTP')
    def test_refused(self, mock_SMTP):
        conn = mock_SMTP.return_value
        conn.__enter__.return_value = conn
        conn.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
        with self.assertRaises(DeliveryFailed):
            self.mailer.send('joe@bloggs.com', 'Hi', 'Hello')
        self.assertEqual(conn.send_message.call_count, 1)


class TestCurrentMailer(TestCase):
    def test_from_config(self):
        """A mailer is configured from the application."""
        app = Flask('test')
        app.config.update({'SMTP_HOST': 'smtp.bloggs.com', 'SMTP_PORT': '25',
                           'SMTP_USER': 'noreply@bloggs.com'})
        mail.init_app(app)
        with app.app_context():
            mailer = mail.current_mailer()
            self.assertIs(mailer, mail.current_mailer())
        self.assertEqual(mailer._host, 'smtp.bloggs.com')
        self.assertEqual(mailer._port, 25)
        self.assertEqual(mailer._sender, 'noreply@bloggs.com')

    def test_shared(self):
        app = Flask('test')
        mail.init_app(app)
        app.extensions['userauth.mailer'] = mock.sentinel.mailer
        with app.app_context():
            self.assertIs(mail.current_mailer(), mock.sentinel.mailer)
