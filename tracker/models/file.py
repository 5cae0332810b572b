"""File model for progress entry attachments. Bytes live on disk below UPLOAD_FOLDER."""
from datetime import datetime
from .base import db, new_id


class File(db.Model):
    __tablename__ = 'files'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    progress_entry_id = db.Column(db.String(36), db.ForeignKey('progress_entries.id'), nullable=False, index=True)
    original_name = db.Column(db.String(255), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    # Relative to UPLOAD_FOLDER: <user_id>/<progress_entry_id>/<file_name>
    file_path = db.Column(db.String(512), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    mime_type = db.Column(db.String(100), nullable=False)
    file_type = db.Column(db.String(100), nullable=False)
    upload_date = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<File {self.original_name}>'
