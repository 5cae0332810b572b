"""
Loads everything a progress report needs into immutable snapshots.

The snapshots decouple rendering from the ORM session: the renderer only ever
sees plain frozen dataclasses, so it can be exercised with literal fixtures.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from ..errors import NotFound
from ..models import Assignment, Admin, ProgressEntry


@dataclass(frozen=True)
class FileSnapshot:
    id: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str


@dataclass(frozen=True)
class EntrySnapshot:
    id: str
    title: str
    description: str
    current_status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    completion_percentage: Optional[int] = None
    hours_worked: Optional[Decimal] = None
    milestones_achieved: Optional[str] = None
    next_steps: Optional[str] = None
    blockers: Optional[str] = None
    created_at: Optional[datetime] = None
    files: Tuple[FileSnapshot, ...] = ()


@dataclass(frozen=True)
class AssignmentSnapshot:
    id: str
    assignment_code: str
    status: str
    trainee_name: str
    trainee_email: str
    project_name: str
    project_description: Optional[str] = None
    difficulty_level: Optional[str] = None
    batch_number: Optional[str] = None
    start_date: Optional[date] = None
    expected_completion_date: Optional[date] = None
    actual_completion_date: Optional[date] = None


@dataclass(frozen=True)
class RecipientSnapshot:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class ReportBundle:
    assignment: AssignmentSnapshot
    entries: Tuple[EntrySnapshot, ...]
    recipients: Tuple[RecipientSnapshot, ...]


class ReportAssembler:
    @staticmethod
    def find_assignment(owner_id, trainee_id, project_id):
        assignment = Assignment.query.filter_by(
            user_id=owner_id,
            trainee_id=trainee_id,
            project_id=project_id,
            is_active=True
        ).first()
        if not assignment:
            raise NotFound('Assignment not found')
        return assignment

    @staticmethod
    def load_recipients(owner_id, admin_ids):
        """Active admins of the owner among admin_ids, in the caller's order."""
        if not admin_ids:
            return []
        admins = Admin.query.filter(
            Admin.id.in_(list(admin_ids)),
            Admin.user_id == owner_id,
            Admin.is_active == True
        ).all()
        by_id = {a.id: a for a in admins}
        ordered = []
        for admin_id in admin_ids:
            admin = by_id.pop(admin_id, None)
            if admin:
                ordered.append(admin)
        return ordered

    @staticmethod
    def assemble(owner_id, trainee_id, project_id, admin_ids=None, require_recipients=True):
        """
        Build the report bundle for one (trainee, project) assignment.

        Raises:
            NotFound: no active assignment, or no valid recipients when
                require_recipients is set.
        """
        assignment = ReportAssembler.find_assignment(owner_id, trainee_id, project_id)

        entries = ProgressEntry.query.filter_by(assignment_id=assignment.id).order_by(
            ProgressEntry.created_at.desc()
        ).all()

        admins = ReportAssembler.load_recipients(owner_id, admin_ids)
        if require_recipients and not admins:
            raise NotFound('No valid admin recipients found')

        return ReportBundle(
            assignment=_snapshot_assignment(assignment),
            entries=tuple(_snapshot_entry(e) for e in entries),
            recipients=tuple(
                RecipientSnapshot(id=a.id, name=a.name, email=a.email) for a in admins
            ),
        )


def _snapshot_assignment(assignment):
    trainee = assignment.trainee
    project = assignment.project
    return AssignmentSnapshot(
        id=assignment.id,
        assignment_code=assignment.assignment_code,
        status=assignment.status,
        trainee_name=trainee.name,
        trainee_email=trainee.email,
        project_name=project.name,
        project_description=project.description,
        difficulty_level=project.difficulty_level,
        batch_number=trainee.batch_number,
        start_date=assignment.start_date,
        expected_completion_date=assignment.expected_completion_date,
        actual_completion_date=assignment.actual_completion_date,
    )


def _snapshot_entry(entry):
    return EntrySnapshot(
        id=entry.id,
        title=entry.title,
        description=entry.description,
        current_status=entry.current_status,
        start_date=entry.start_date,
        end_date=entry.end_date,
        completion_percentage=entry.completion_percentage,
        hours_worked=entry.hours_worked,
        milestones_achieved=entry.milestones_achieved,
        next_steps=entry.next_steps,
        blockers=entry.blockers,
        created_at=entry.created_at,
        files=tuple(
            FileSnapshot(
                id=f.id,
                original_name=f.original_name,
                file_path=f.file_path,
                file_size=f.file_size,
                mime_type=f.mime_type,
            ) for f in entry.files
        ),
    )
