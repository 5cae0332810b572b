"""Progress entries and the directed links between them."""
from datetime import datetime
from .base import db, new_id
from ..constants import ProgressStatus, LinkType


class ProgressEntry(db.Model):
    __tablename__ = 'progress_entries'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    assignment_id = db.Column(db.String(36), db.ForeignKey('assignments.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    milestones_achieved = db.Column(db.Text, nullable=True)
    current_status = db.Column(db.String(20), default=ProgressStatus.IN_PROGRESS, nullable=False)
    next_steps = db.Column(db.Text, nullable=True)
    blockers = db.Column(db.Text, nullable=True)
    completion_percentage = db.Column(db.Integer, default=0)
    hours_worked = db.Column(db.Numeric(5, 2), default=0)
    created_at = db.Column(db.DateTime, index=True, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Files are removed explicitly by ProgressService.delete_entry
    files = db.relationship('File', backref='progress_entry', lazy='select',
                            order_by='File.upload_date')
    outgoing_links = db.relationship('ProgressLink',
                                     foreign_keys='ProgressLink.progress_entry_id',
                                     backref='progress_entry', lazy='dynamic')
    incoming_links = db.relationship('ProgressLink',
                                     foreign_keys='ProgressLink.linked_progress_entry_id',
                                     backref='linked_progress_entry', lazy='dynamic')

    def __repr__(self):
        return f'<ProgressEntry {self.title} ({self.current_status})>'


class ProgressLink(db.Model):
    __tablename__ = 'progress_links'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    progress_entry_id = db.Column(db.String(36), db.ForeignKey('progress_entries.id'), nullable=False)
    linked_progress_entry_id = db.Column(db.String(36), db.ForeignKey('progress_entries.id'), nullable=False)
    link_type = db.Column(db.String(20), default=LinkType.RELATED, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
