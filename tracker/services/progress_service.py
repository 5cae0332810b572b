import os
import uuid
from datetime import datetime

from flask import current_app
from sqlalchemy import or_
from werkzeug.utils import secure_filename

from .. import db
from ..constants import AssignmentStatus, ProgressStatus
from ..errors import ValidationError
from ..models import ProgressEntry, ProgressLink, File


class ProgressService:
    @staticmethod
    def _validate(completion_percentage, hours_worked, current_status):
        errors = []
        if completion_percentage is not None and not 0 <= int(completion_percentage) <= 100:
            errors.append('"completionPercentage" must be between 0 and 100')
        if hours_worked is not None and float(hours_worked) < 0:
            errors.append('"hoursWorked" must be greater than or equal to 0')
        if current_status not in ProgressStatus.ALL:
            errors.append(f'"currentStatus" must be one of {", ".join(ProgressStatus.ALL)}')
        if errors:
            raise ValidationError(errors=errors)

    @staticmethod
    def record_entry(assignment, title, description, start_date, end_date,
                     current_status=ProgressStatus.IN_PROGRESS, completion_percentage=0,
                     hours_worked=0, milestones_achieved=None, next_steps=None, blockers=None):
        """
        Add a progress entry and advance the assignment's lifecycle.

        The first entry moves a Not Started assignment to In Progress; an entry
        that is Completed at 100% completes the assignment.
        """
        ProgressService._validate(completion_percentage, hours_worked, current_status)

        entry = ProgressEntry(
            assignment_id=assignment.id,
            title=title,
            description=description,
            start_date=start_date,
            end_date=end_date,
            current_status=current_status,
            completion_percentage=completion_percentage,
            hours_worked=hours_worked,
            milestones_achieved=milestones_achieved,
            next_steps=next_steps,
            blockers=blockers,
        )
        db.session.add(entry)

        if assignment.status == AssignmentStatus.NOT_STARTED:
            assignment.status = AssignmentStatus.IN_PROGRESS

        if current_status == ProgressStatus.COMPLETED and completion_percentage == 100:
            assignment.status = AssignmentStatus.COMPLETED
            assignment.actual_completion_date = datetime.utcnow().date()

        db.session.commit()
        return entry

    @staticmethod
    def attach_file(entry, owner_id, original_name, data, mime_type, file_type=None):
        """Store bytes under <UPLOAD_FOLDER>/<owner>/<entry>/ and record a File row."""
        safe_name = secure_filename(original_name) or 'file'
        stored_name = f"{uuid.uuid4()}_{safe_name}"
        relative_path = os.path.join(owner_id, entry.id, stored_name)
        absolute_path = os.path.join(current_app.config['UPLOAD_FOLDER'], relative_path)
        os.makedirs(os.path.dirname(absolute_path), exist_ok=True)
        with open(absolute_path, 'wb') as fh:
            fh.write(data)

        record = File(
            progress_entry_id=entry.id,
            original_name=original_name,
            file_name=stored_name,
            file_path=relative_path,
            file_size=len(data),
            mime_type=mime_type,
            file_type=file_type or mime_type.split('/')[0],
        )
        db.session.add(record)
        db.session.commit()
        return record

    @staticmethod
    def link_entries(entry, other, link_type, notes=None):
        link = ProgressLink(progress_entry_id=entry.id, linked_progress_entry_id=other.id,
                            link_type=link_type, notes=notes)
        db.session.add(link)
        db.session.commit()
        return link

    @staticmethod
    def delete_entry(entry):
        """Delete an entry with its files (rows and stored bytes) and links."""
        upload_folder = current_app.config['UPLOAD_FOLDER']
        for f in list(entry.files):
            path = os.path.join(upload_folder, f.file_path)
            if os.path.exists(path):
                try:
                    os.remove(path)
                except OSError as e:
                    current_app.logger.error(f"Error removing stored file {path}: {e}")
            db.session.delete(f)

        ProgressLink.query.filter(or_(
            ProgressLink.progress_entry_id == entry.id,
            ProgressLink.linked_progress_entry_id == entry.id
        )).delete(synchronize_session=False)

        db.session.delete(entry)
        db.session.commit()

    @staticmethod
    def soft_delete_assignment(assignment):
        assignment.is_active = False
        db.session.commit()
