"""
SMTP delivery built fresh from an account's EmailConfiguration.

Messages are composed with Flask-Mail and handed to smtplib directly, because
every account brings its own host, port, credentials and TLS policy.
"""
import logging
import smtplib
import socket
import ssl

from ..errors import TransportError

logger = logging.getLogger(__name__)

STARTTLS_PORT = 587
SMTPS_PORT = 465
PLAIN_PORT = 25


def build_transport_options(email_config, timeout=10, allow_insecure_tls=False):
    """
    Normalize the stored SMTP settings into transport options.

    Well-known ports override the stored secure flag:
        587 -> secure=False, require_tls=True (STARTTLS)
        465 -> secure=True, require_tls=False (implicit TLS)
        25  -> secure=False, require_tls=False, ignore_tls=True
        any other port keeps smtp_secure and requires STARTTLS when not secure.
    """
    port = int(email_config.smtp_port)
    secure = bool(email_config.smtp_secure)
    options = {
        'host': email_config.smtp_host,
        'port': port,
        'secure': secure,
        'require_tls': not secure,
        'ignore_tls': False,
        'username': email_config.smtp_username,
        'password': email_config.smtp_password,
        'timeout': timeout,
        'allow_insecure_tls': allow_insecure_tls,
    }

    if port == STARTTLS_PORT:
        options['secure'] = False
        options['require_tls'] = True
    elif port == SMTPS_PORT:
        options['secure'] = True
        options['require_tls'] = False
    elif port == PLAIN_PORT:
        options['secure'] = False
        options['require_tls'] = False
        options['ignore_tls'] = True

    return options


def describe_failure(error):
    """Map an SMTP/socket failure to a hint for the instructor."""
    text = str(error)
    if isinstance(error, ssl.SSLError) or 'wrong version number' in text:
        return "SSL/TLS version mismatch. Try using port 587 with STARTTLS instead of port 465 with SSL."
    if isinstance(error, UnicodeError):
        return "SMTP username and password must contain only ASCII characters."
    if isinstance(error, smtplib.SMTPAuthenticationError):
        return "Authentication failed. Check your username and password."
    if isinstance(error, (socket.gaierror, ConnectionRefusedError, socket.timeout,
                          smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected)):
        return "Connection failed. Check your SMTP host and port settings."
    return None


class SMTPTransport:
    """One-shot SMTP connection for a single account."""

    def __init__(self, options):
        self.options = options

    def _ssl_context(self):
        context = ssl.create_default_context()
        if self.options.get('allow_insecure_tls'):
            # Legacy institutional servers: self-signed certificates, TLS 1.0, weak ciphers
            logger.warning(f"Relaxed TLS verification for SMTP host {self.options['host']}")
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            context.minimum_version = ssl.TLSVersion.TLSv1
            try:
                context.set_ciphers('DEFAULT:@SECLEVEL=0')
            except ssl.SSLError as e:
                logger.warning(f"Could not enable legacy ciphers: {e}")
        return context

    def _connect(self):
        opts = self.options
        if opts['secure']:
            server = smtplib.SMTP_SSL(opts['host'], opts['port'], timeout=opts['timeout'],
                                      context=self._ssl_context())
        else:
            server = smtplib.SMTP(opts['host'], opts['port'], timeout=opts['timeout'])
            server.ehlo()
            if not opts['ignore_tls']:
                if server.has_extn('starttls'):
                    server.starttls(context=self._ssl_context())
                    server.ehlo()
                elif opts['require_tls']:
                    server.quit()
                    raise smtplib.SMTPNotSupportedError('STARTTLS extension not supported by server')

        if opts.get('username'):
            server.login(opts['username'], opts['password'])
        return server

    def verify(self):
        """Connect and authenticate without sending anything."""
        try:
            server = self._connect()
            server.quit()
        except (smtplib.SMTPException, OSError, ValueError) as e:
            raise TransportError(str(e), suggestion=describe_failure(e)) from e
        return True

    def send(self, message):
        """
        Deliver a flask_mail.Message.

        Returns:
            str: the Message-ID of the delivered message
        """
        try:
            server = self._connect()
            try:
                server.sendmail(message.sender, message.send_to, message.as_bytes())
            finally:
                try:
                    server.quit()
                except smtplib.SMTPServerDisconnected:
                    pass
        except (smtplib.SMTPException, OSError, ValueError) as e:
            raise TransportError(str(e), suggestion=describe_failure(e)) from e
        return message.msgId
