"""Assignment model: one project assigned to one trainee by one instructor."""
from datetime import datetime
from .base import db, new_id
from ..constants import AssignmentStatus, ProgressType


class Assignment(db.Model):
    __tablename__ = 'assignments'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    assignment_code = db.Column(db.String(50), unique=True, nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False)
    trainee_id = db.Column(db.String(36), db.ForeignKey('trainees.id'), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    expected_completion_date = db.Column(db.Date, nullable=True)
    actual_completion_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), default=AssignmentStatus.NOT_STARTED, nullable=False)
    progress_type = db.Column(db.String(20), default=ProgressType.INDIVIDUAL)
    notes = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    project = db.relationship('Project', backref=db.backref('assignments', lazy='dynamic'))
    trainee = db.relationship('Trainee', backref=db.backref('assignments', lazy='dynamic'))
    progress_entries = db.relationship(
        'ProgressEntry',
        backref='assignment',
        lazy='dynamic',
        order_by='ProgressEntry.created_at.desc()'
    )

    def __repr__(self):
        return f'<Assignment {self.assignment_code}>'
