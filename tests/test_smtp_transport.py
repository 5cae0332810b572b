import smtplib
import socket
import ssl
import unittest
from types import SimpleNamespace
from unittest.mock import patch, MagicMock

from tracker.errors import TransportError
from tracker.services.smtp_transport import build_transport_options, describe_failure, SMTPTransport


def stored_config(port, secure=False):
    return SimpleNamespace(smtp_host='smtp.example.com', smtp_port=port, smtp_secure=secure,
                           smtp_username='user@example.com', smtp_password='secret')


class TestBuildTransportOptions(unittest.TestCase):

    def test_starttls_port_ignores_secure_flag(self):
        options = build_transport_options(stored_config(587, secure=True))
        self.assertFalse(options['secure'])
        self.assertTrue(options['require_tls'])
        self.assertFalse(options['ignore_tls'])

    def test_implicit_tls_port(self):
        options = build_transport_options(stored_config(465, secure=False))
        self.assertTrue(options['secure'])
        self.assertFalse(options['require_tls'])

    def test_plain_port(self):
        options = build_transport_options(stored_config(25, secure=True))
        self.assertFalse(options['secure'])
        self.assertFalse(options['require_tls'])
        self.assertTrue(options['ignore_tls'])

    def test_other_port_keeps_secure_flag(self):
        options = build_transport_options(stored_config(2525, secure=False))
        self.assertFalse(options['secure'])
        self.assertTrue(options['require_tls'])

        options = build_transport_options(stored_config(2465, secure=True))
        self.assertTrue(options['secure'])
        self.assertFalse(options['require_tls'])

    def test_credentials_and_timeout(self):
        options = build_transport_options(stored_config(587), timeout=5, allow_insecure_tls=True)
        self.assertEqual(options['host'], 'smtp.example.com')
        self.assertEqual(options['username'], 'user@example.com')
        self.assertEqual(options['password'], 'secret')
        self.assertEqual(options['timeout'], 5)
        self.assertTrue(options['allow_insecure_tls'])


class TestDescribeFailure(unittest.TestCase):

    def test_tls_mismatch(self):
        hint = describe_failure(ssl.SSLError('[SSL: WRONG_VERSION_NUMBER] wrong version number'))
        self.assertIn('port 587', hint)

    def test_authentication(self):
        hint = describe_failure(smtplib.SMTPAuthenticationError(535, b'bad credentials'))
        self.assertIn('username and password', hint)

    def test_connection(self):
        self.assertIn('SMTP host and port', describe_failure(ConnectionRefusedError()))
        self.assertIn('SMTP host and port', describe_failure(socket.gaierror('no host')))

    def test_unknown(self):
        self.assertIsNone(describe_failure(ValueError('odd')))


class TestSMTPTransport(unittest.TestCase):

    def setUp(self):
        self.message = SimpleNamespace(sender='user@example.com', send_to={'ravi@example.com'},
                                       msgId='<abc@example.com>', as_bytes=lambda: b'body')

    @patch('tracker.services.smtp_transport.smtplib.SMTP')
    def test_send_uses_starttls(self, mock_smtp):
        server = MagicMock()
        server.has_extn.return_value = True
        mock_smtp.return_value = server

        transport = SMTPTransport(build_transport_options(stored_config(587)))
        message_id = transport.send(self.message)

        self.assertEqual(message_id, '<abc@example.com>')
        server.starttls.assert_called_once()
        server.login.assert_called_once_with('user@example.com', 'secret')
        server.sendmail.assert_called_once_with('user@example.com', {'ravi@example.com'}, b'body')
        server.quit.assert_called_once()

    @patch('tracker.services.smtp_transport.smtplib.SMTP')
    def test_required_tls_not_offered(self, mock_smtp):
        server = MagicMock()
        server.has_extn.return_value = False
        mock_smtp.return_value = server

        transport = SMTPTransport(build_transport_options(stored_config(587)))
        with self.assertRaises(TransportError):
            transport.send(self.message)
        server.sendmail.assert_not_called()

    @patch('tracker.services.smtp_transport.smtplib.SMTP')
    def test_plain_port_skips_starttls(self, mock_smtp):
        server = MagicMock()
        server.has_extn.return_value = True
        mock_smtp.return_value = server

        SMTPTransport(build_transport_options(stored_config(25))).verify()
        server.starttls.assert_not_called()

    @patch('tracker.services.smtp_transport.smtplib.SMTP_SSL')
    def test_implicit_tls_uses_smtp_ssl(self, mock_smtp_ssl):
        server = MagicMock()
        mock_smtp_ssl.return_value = server

        self.assertTrue(SMTPTransport(build_transport_options(stored_config(465))).verify())
        mock_smtp_ssl.assert_called_once()
        server.login.assert_called_once()

    @patch('tracker.services.smtp_transport.smtplib.SMTP')
    def test_auth_failure_wrapped_with_suggestion(self, mock_smtp):
        server = MagicMock()
        server.has_extn.return_value = True
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b'Invalid login')
        mock_smtp.return_value = server

        with self.assertRaises(TransportError) as ctx:
            SMTPTransport(build_transport_options(stored_config(587))).send(self.message)
        self.assertIn('Suggestion: Authentication failed', str(ctx.exception))

    @patch('tracker.services.smtp_transport.smtplib.SMTP')
    def test_non_ascii_password_wrapped(self, mock_smtp):
        server = MagicMock()
        server.has_extn.return_value = True
        server.login.side_effect = UnicodeEncodeError('ascii', 'pässwörd', 1, 2, 'ordinal not in range(128)')
        mock_smtp.return_value = server

        with self.assertRaises(TransportError) as ctx:
            SMTPTransport(build_transport_options(stored_config(25))).send(self.message)
        self.assertIn('ASCII characters', str(ctx.exception))
        server.sendmail.assert_not_called()

    @patch('tracker.services.smtp_transport.smtplib.SMTP')
    def test_timeout_wrapped(self, mock_smtp):
        mock_smtp.side_effect = socket.timeout('timed out')
        with self.assertRaises(TransportError) as ctx:
            SMTPTransport(build_transport_options(stored_config(587))).verify()
        self.assertIn('timed out', str(ctx.exception))

    def test_relaxed_context_only_when_allowed(self):
        strict = SMTPTransport(build_transport_options(stored_config(587)))._ssl_context()
        self.assertEqual(strict.verify_mode, ssl.CERT_REQUIRED)

        relaxed = SMTPTransport(
            build_transport_options(stored_config(587), allow_insecure_tls=True))._ssl_context()
        self.assertEqual(relaxed.verify_mode, ssl.CERT_NONE)
        self.assertFalse(relaxed.check_hostname)


if __name__ == '__main__':
    unittest.main()
