"""Per-account SMTP credentials."""
from datetime import datetime
from .base import db, new_id
from ..constants import ConfigTestStatus


class EmailConfiguration(db.Model):
    __tablename__ = 'email_configurations'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, unique=True)
    email_address = db.Column(db.String(120), nullable=False)
    smtp_host = db.Column(db.String(255), nullable=False)
    smtp_port = db.Column(db.Integer, nullable=False, default=587)
    smtp_secure = db.Column(db.Boolean, default=False, nullable=False)
    smtp_username = db.Column(db.String(255), nullable=False)
    smtp_password = db.Column(db.String(255), nullable=False)
    is_configured = db.Column(db.Boolean, default=False, nullable=False)
    last_tested = db.Column(db.DateTime, nullable=True)
    test_status = db.Column(db.String(20), default=ConfigTestStatus.NOT_TESTED, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        """Serialize without the SMTP password."""
        return {
            'id': self.id,
            'emailAddress': self.email_address,
            'smtpHost': self.smtp_host,
            'smtpPort': self.smtp_port,
            'smtpSecure': self.smtp_secure,
            'smtpUsername': self.smtp_username,
            'isConfigured': self.is_configured,
            'lastTested': self.last_tested.isoformat() if self.last_tested else None,
            'testStatus': self.test_status,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
