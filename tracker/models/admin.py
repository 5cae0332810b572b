"""Admin contacts that receive progress reports."""
from datetime import datetime
from .base import db, new_id


class Admin(db.Model):
    __tablename__ = 'admins'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    department = db.Column(db.String(100), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    is_default = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def make_default(self):
        """Flag this admin as default and unset the flag on the owner's others."""
        Admin.query.filter(
            Admin.user_id == self.user_id,
            Admin.id != self.id,
            Admin.is_default == True
        ).update({'is_default': False}, synchronize_session=False)
        self.is_default = True

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'department': self.department,
            'phone': self.phone,
            'isDefault': self.is_default,
            'isActive': self.is_active,
        }

    def __repr__(self):
        return f'<Admin {self.name} <{self.email}>>'
