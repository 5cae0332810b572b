from datetime import datetime
from .base import db, new_id


class Trainee(db.Model):
    __tablename__ = 'trainees'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    batch_number = db.Column(db.String(50), nullable=True)
    join_date = db.Column(db.Date, nullable=True)
    background = db.Column(db.Text, nullable=True)
    skills = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Trainee {self.name}>'
