from dataclasses import dataclass, field
from datetime import datetime
from email.utils import make_msgid
import mimetypes
import os
from typing import List, Optional

from flask import current_app, render_template
from flask_mail import Message

from .. import db
from ..constants import EmailStatus, ConfigTestStatus, ADMIN_TEST_SUBJECT, CONFIG_TEST_SUBJECT, SYSTEM_NAME
from ..errors import ConfigurationMissing, TransportError
from ..models import EmailConfiguration, EmailLog
from .smtp_transport import SMTPTransport, build_transport_options


@dataclass(frozen=True)
class Attachment:
    filename: str
    path: str
    content_type: Optional[str] = None

    def read(self):
        with open(self.path, 'rb') as fh:
            return fh.read()


@dataclass(frozen=True)
class RecipientOutcome:
    admin_id: str
    admin_email: str
    status: str  # 'sent' | 'failed'
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self):
        data = {'adminId': self.admin_id, 'adminEmail': self.admin_email, 'status': self.status}
        if self.message_id:
            data['messageId'] = self.message_id
        if self.error:
            data['error'] = self.error
        return data


@dataclass(frozen=True)
class DispatchResult:
    outcomes: List[RecipientOutcome] = field(default_factory=list)
    attachment_count: int = 0

    @property
    def sent_count(self):
        return sum(1 for o in self.outcomes if o.status == 'sent')

    @property
    def failed_count(self):
        return sum(1 for o in self.outcomes if o.status == 'failed')


class EmailService:
    @staticmethod
    def get_configuration(owner_id):
        """
        The owner's SMTP configuration.

        Raises:
            ConfigurationMissing: nothing saved, or saved but not configured
        """
        config = EmailConfiguration.query.filter_by(user_id=owner_id, is_configured=True).first()
        if not config:
            raise ConfigurationMissing()
        return config

    @staticmethod
    def create_transport(email_config):
        options = build_transport_options(
            email_config,
            timeout=current_app.config.get('SMTP_TIMEOUT', 10),
            allow_insecure_tls=current_app.config.get('SMTP_ALLOW_INSECURE_TLS', False)
        )
        return SMTPTransport(options)

    @staticmethod
    def build_message(sender, to, subject, html, attachments=None, text=None):
        msg = Message(subject=subject, sender=sender, recipients=[to], html=html, body=text)
        msg.msgId = make_msgid(domain=sender.split('@')[-1] if '@' in sender else None)
        for attachment in attachments or []:
            content_type = attachment.content_type or \
                mimetypes.guess_type(attachment.filename)[0] or 'application/octet-stream'
            msg.attach(filename=attachment.filename, content_type=content_type,
                       data=attachment.read())
        return msg

    @staticmethod
    def deliver(owner_id, to, subject, html, attachments=None, text=None):
        """
        Send one message without touching EmailLog.

        Returns:
            str: message id accepted by the server

        Raises:
            ConfigurationMissing, TransportError
        """
        config = EmailService.get_configuration(owner_id)
        transport = EmailService.create_transport(config)
        msg = EmailService.build_message(config.email_address, to, subject, html,
                                         attachments=attachments, text=text)
        return transport.send(msg)

    @staticmethod
    def send_email(owner_id, to, subject, html, attachments=None, recipient_name=None, text=None):
        """
        Send one message and record the attempt as an EmailLog row.

        The row is committed as Pending before delivery is attempted and then
        moved to Sent or Failed.

        Returns:
            tuple: (EmailLog, message_id)

        Raises:
            ConfigurationMissing, TransportError: after the row is marked Failed.
                Any other delivery error is re-raised as TransportError.
        """
        attachments = attachments or []
        email_log = EmailLog(
            user_id=owner_id,
            recipient_email=to,
            recipient_name=recipient_name,
            subject=subject,
            body=html,
            attachment_count=len(attachments),
            status=EmailStatus.PENDING
        )
        db.session.add(email_log)
        db.session.commit()

        try:
            message_id = EmailService.deliver(owner_id, to, subject, html,
                                              attachments=attachments, text=text)
        except (ConfigurationMissing, TransportError) as e:
            email_log.mark_failed(str(e))
            db.session.commit()
            current_app.logger.error(f"Email to {to} failed: {e}")
            raise
        except Exception as e:
            # e.g. an attachment removed from disk; the attempt still ends as Failed
            email_log.mark_failed(str(e) or type(e).__name__)
            db.session.commit()
            current_app.logger.exception(f"Email to {to} failed: {e}")
            raise TransportError(email_log.error_message) from e

        email_log.mark_sent(message_id)
        db.session.commit()
        current_app.logger.info(f"Email to {to} sent ({message_id})")
        return email_log, message_id

    @staticmethod
    def send_report(owner_id, subject, html, recipients, attachments=None):
        """
        Send a rendered report to each recipient in order.

        Recipients are independent: a failure for one is recorded in its
        outcome and EmailLog row and the loop moves on.

        Args:
            recipients: objects with id, name and email (RecipientSnapshot or Admin)
            attachments: list of Attachment

        Returns:
            DispatchResult with one outcome per recipient

        Raises:
            ConfigurationMissing: before any attempt when the account has no SMTP settings
        """
        attachments = attachments or []
        EmailService.get_configuration(owner_id)

        outcomes = []
        for recipient in recipients:
            try:
                _, message_id = EmailService.send_email(
                    owner_id, recipient.email, subject, html,
                    attachments=attachments, recipient_name=recipient.name
                )
            except (ConfigurationMissing, TransportError) as e:
                outcomes.append(RecipientOutcome(
                    admin_id=recipient.id, admin_email=recipient.email,
                    status='failed', error=str(e)
                ))
                continue
            outcomes.append(RecipientOutcome(
                admin_id=recipient.id, admin_email=recipient.email,
                status='sent', message_id=message_id
            ))

        result = DispatchResult(outcomes=outcomes, attachment_count=len(attachments))
        current_app.logger.info(
            f"Report '{subject}' dispatched: {result.sent_count} sent, {result.failed_count} failed"
        )
        return result

    @staticmethod
    def _record_test(config, status):
        config.last_tested = datetime.utcnow()
        config.test_status = status
        db.session.commit()

    @staticmethod
    def test_connection(owner_id):
        """Verify host, port, TLS and credentials without sending mail."""
        config = EmailService.get_configuration(owner_id)
        try:
            EmailService.create_transport(config).verify()
        except TransportError as e:
            EmailService._record_test(config, ConfigTestStatus.FAILED)
            current_app.logger.error(f"SMTP connection test failed for {config.smtp_host}: {e}")
            raise
        EmailService._record_test(config, ConfigTestStatus.SUCCESS)
        return "SMTP connection successful"

    @staticmethod
    def test_configuration(owner_id):
        """Verify the connection and send a test message to the sender address."""
        config = EmailService.get_configuration(owner_id)
        transport = EmailService.create_transport(config)
        try:
            transport.verify()
            msg = EmailService.build_message(
                config.email_address, config.email_address, CONFIG_TEST_SUBJECT, html=None,
                text="This is a test email to verify your SMTP configuration."
            )
            transport.send(msg)
        except TransportError as e:
            EmailService._record_test(config, ConfigTestStatus.FAILED)
            current_app.logger.error(f"Email configuration test failed for {config.smtp_host}: {e}")
            raise
        EmailService._record_test(config, ConfigTestStatus.SUCCESS)
        return "Email configuration test successful"

    @staticmethod
    def send_test_email_to_admin(owner_id, admin):
        """Send the fixed connectivity-check message to one admin, logged like any send."""
        sent_on = datetime.utcnow().strftime('%Y-%m-%d %H:%M:%S UTC')
        html = render_template('email/admin_test.html', admin=admin, sent_on=sent_on,
                               system_name=SYSTEM_NAME)
        text = render_template('email/admin_test.txt', admin=admin, sent_on=sent_on,
                               system_name=SYSTEM_NAME)
        email_log, _ = EmailService.send_email(
            owner_id, admin.email, ADMIN_TEST_SUBJECT, html,
            recipient_name=admin.name, text=text
        )
        return email_log


def attachments_from_bundle(bundle, upload_folder):
    """Files of every entry that are present on disk, in entry order."""
    attachments = []
    for entry in bundle.entries:
        for f in entry.files:
            path = os.path.join(upload_folder, f.file_path)
            if os.path.exists(path):
                attachments.append(Attachment(filename=f.original_name, path=path,
                                              content_type=f.mime_type))
    return attachments
