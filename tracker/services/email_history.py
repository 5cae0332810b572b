"""Querying, correcting, pruning and retrying past delivery attempts."""
import csv
import io
from dataclasses import dataclass
from datetime import datetime, timedelta, date
from typing import Optional

from flask import current_app
from sqlalchemy import func, or_

from .. import db
from ..constants import EmailStatus, REPORT_SUBJECT_PREFIX
from ..errors import NotFound, ValidationError, ConfigurationMissing, TransportError
from ..models import EmailLog
from .email_service import EmailService

CSV_HEADERS = [
    'Recipient Email',
    'Recipient Name',
    'Subject',
    'Attachment Count',
    'Status',
    'Error Message',
    'Sent At',
    'Created At',
]

# Manual corrections may only follow the delivery state machine
ALLOWED_TRANSITIONS = {
    EmailStatus.PENDING: {EmailStatus.SENT, EmailStatus.FAILED},
    EmailStatus.FAILED: {EmailStatus.SENT, EmailStatus.FAILED},
    EmailStatus.SENT: set(),
}


@dataclass(frozen=True)
class HistoryFilters:
    status: Optional[str] = None
    recipient_email: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None


def parse_report_subject(subject):
    """Split 'Progress Report - <trainee> - <project>' into its names."""
    if not subject or REPORT_SUBJECT_PREFIX not in subject:
        return None, None
    parts = subject.split(REPORT_SUBJECT_PREFIX, 1)[1].split(' - ')
    if len(parts) < 2:
        return None, None
    # Project names may themselves contain ' - '
    return {'name': parts[0]}, {'name': ' - '.join(parts[1:])}


class EmailHistoryService:
    @staticmethod
    def query(owner_id, filters=None):
        filters = filters or HistoryFilters()
        query = EmailLog.query.filter(EmailLog.user_id == owner_id)

        if filters.status in EmailStatus.ALL:
            query = query.filter(EmailLog.status == filters.status)
        if filters.recipient_email:
            query = query.filter(EmailLog.recipient_email.like(f"%{filters.recipient_email}%"))
        if filters.start_date:
            query = query.filter(EmailLog.created_at >= filters.start_date)
        if filters.end_date:
            query = query.filter(EmailLog.created_at <= filters.end_date)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(or_(
                EmailLog.subject.like(pattern),
                EmailLog.recipient_name.like(pattern),
                EmailLog.recipient_email.like(pattern),
            ))
        return query.order_by(EmailLog.created_at.desc())

    @staticmethod
    def enrich(email_log):
        data = email_log.to_dict()
        trainee, project = parse_report_subject(email_log.subject)
        data['trainee'] = trainee
        data['project'] = project
        data['recipients'] = [email_log.recipient_email] if email_log.recipient_email else []
        return data

    @staticmethod
    def paginate(owner_id, filters=None, page=1, limit=10):
        pagination = EmailHistoryService.query(owner_id, filters).paginate(
            page=page, per_page=limit, error_out=False)
        total_pages = pagination.pages
        return {
            'emailHistory': [EmailHistoryService.enrich(e) for e in pagination.items],
            'pagination': {
                'currentPage': page,
                'totalPages': total_pages,
                'totalItems': pagination.total,
                'itemsPerPage': limit,
                'hasNextPage': page < total_pages,
                'hasPreviousPage': page > 1,
            },
        }

    @staticmethod
    def statistics(owner_id):
        rows = db.session.query(EmailLog.status, func.count(EmailLog.id)).filter(
            EmailLog.user_id == owner_id
        ).group_by(EmailLog.status).all()

        stats = {'total': 0, 'sent': 0, 'failed': 0, 'pending': 0}
        for status, count in rows:
            stats['total'] += count
            stats[status.lower()] = count
        return stats

    @staticmethod
    def recent_activity(owner_id, days=30, now=None):
        """Number of attempts per calendar day over the trailing window, newest day first."""
        since = (now or datetime.utcnow()) - timedelta(days=days)
        day = func.date(EmailLog.created_at)
        rows = db.session.query(day, func.count(EmailLog.id)).filter(
            EmailLog.user_id == owner_id,
            EmailLog.created_at >= since
        ).group_by(day).order_by(day.desc()).all()

        activity = []
        for bucket, count in rows:
            if isinstance(bucket, date):
                bucket = bucket.isoformat()
            activity.append({'date': str(bucket), 'count': count})
        return activity

    @staticmethod
    def get(owner_id, email_id):
        email_log = EmailLog.query.filter_by(id=email_id, user_id=owner_id).first()
        if not email_log:
            raise NotFound('Email record not found')
        return email_log

    @staticmethod
    def update_status(owner_id, email_id, status, error_message=None):
        """Manually correct a record's delivery status within the state machine."""
        email_log = EmailHistoryService.get(owner_id, email_id)

        if status not in EmailStatus.ALL:
            raise ValidationError(f"Status must be one of: {', '.join(EmailStatus.ALL)}")
        if status not in ALLOWED_TRANSITIONS[email_log.status]:
            raise ValidationError(f"Cannot change status from {email_log.status} to {status}")

        if status == EmailStatus.SENT:
            email_log.mark_sent()
        elif status == EmailStatus.FAILED:
            if not error_message or not error_message.strip():
                raise ValidationError('An error message is required for failed records')
            email_log.mark_failed(error_message.strip())

        db.session.commit()
        return email_log

    @staticmethod
    def delete(owner_id, email_id):
        email_log = EmailHistoryService.get(owner_id, email_id)
        db.session.delete(email_log)
        db.session.commit()

    @staticmethod
    def delete_older_than(owner_id, days, now=None):
        """Bulk delete the owner's records created before now - days. Returns the count."""
        if days is None or days < 0:
            raise ValidationError('"olderThan" must be a non-negative number of days')
        cutoff = (now or datetime.utcnow()) - timedelta(days=days)
        deleted = EmailLog.query.filter(
            EmailLog.user_id == owner_id,
            EmailLog.created_at < cutoff
        ).delete(synchronize_session=False)
        db.session.commit()
        current_app.logger.info(f"Deleted {deleted} email records older than {days} days")
        return deleted

    @staticmethod
    def retry(owner_id, email_id):
        """
        Resend a Failed record using its stored recipient, subject and body.

        Attachments are not resent: only their count is stored on the row.

        Returns:
            tuple: (success, EmailLog)
        """
        email_log = EmailLog.query.filter_by(
            id=email_id, user_id=owner_id, status=EmailStatus.FAILED
        ).first()
        if not email_log:
            raise NotFound('Failed email record not found')

        try:
            message_id = EmailService.deliver(owner_id, email_log.recipient_email,
                                              email_log.subject, email_log.body)
        except (ConfigurationMissing, TransportError) as e:
            email_log.error_message = str(e)
            db.session.commit()
            current_app.logger.error(f"Retry of email {email_log.id} failed: {e}")
            return False, email_log
        except Exception as e:
            email_log.error_message = str(e) or type(e).__name__
            db.session.commit()
            current_app.logger.exception(f"Retry of email {email_log.id} failed: {e}")
            return False, email_log

        email_log.mark_sent(message_id)
        db.session.commit()
        return True, email_log

    @staticmethod
    def export_rows(owner_id, filters=None):
        rows = []
        for e in EmailHistoryService.query(owner_id, filters).all():
            rows.append([
                e.recipient_email,
                e.recipient_name or '',
                e.subject,
                e.attachment_count,
                e.status,
                e.error_message or '',
                e.sent_at.isoformat() if e.sent_at else '',
                e.created_at.isoformat() if e.created_at else '',
            ])
        return rows

    @staticmethod
    def to_csv(rows):
        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')
        writer.writerow(CSV_HEADERS)
        writer.writerows(rows)
        return output.getvalue()
