"""One row per delivery attempt. Only status fields change after creation."""
from datetime import datetime
from .base import db, new_id
from ..constants import EmailStatus


class EmailLog(db.Model):
    __tablename__ = 'email_logs'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    recipient_email = db.Column(db.String(120), nullable=False, index=True)
    recipient_name = db.Column(db.String(100), nullable=True)
    subject = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    attachment_count = db.Column(db.Integer, default=0, nullable=False)
    status = db.Column(db.String(20), default=EmailStatus.PENDING, nullable=False, index=True)
    error_message = db.Column(db.Text, nullable=True)
    message_id = db.Column(db.String(255), nullable=True)
    sent_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, index=True, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def mark_sent(self, message_id=None):
        self.status = EmailStatus.SENT
        self.sent_at = datetime.utcnow()
        self.error_message = None
        if message_id:
            self.message_id = message_id

    def mark_failed(self, error_message):
        self.status = EmailStatus.FAILED
        self.error_message = error_message or 'Unknown error'

    def to_dict(self, include_body=False):
        data = {
            'id': self.id,
            'recipientEmail': self.recipient_email,
            'recipientName': self.recipient_name,
            'subject': self.subject,
            'attachmentCount': self.attachment_count,
            'status': self.status,
            'errorMessage': self.error_message,
            'messageId': self.message_id,
            'sentAt': self.sent_at.isoformat() if self.sent_at else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        if include_body:
            data['body'] = self.body
        return data

    def __repr__(self):
        return f'<EmailLog {self.id} to {self.recipient_email} ({self.status})>'
