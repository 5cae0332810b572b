"""
Turns a ReportBundle into the subject and HTML body of a progress report.

render_report is side-effect free: the same bundle, options and generated_at
always produce the same bytes, which is what lets the preview endpoint show
exactly what the send endpoint delivers and logs.
"""
from dataclasses import dataclass
from datetime import datetime

from flask import render_template

from ..constants import (STATUS_COLORS, DEFAULT_STATUS_COLOR, REPORT_SUBJECT_PREFIX,
                         LATEST_ENTRY_COUNT, SYSTEM_NAME)

DATE_FORMAT = '%Y-%m-%d'
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S UTC'


@dataclass(frozen=True)
class RenderedReport:
    subject: str
    html: str


def default_subject(trainee_name, project_name):
    return f"{REPORT_SUBJECT_PREFIX}{trainee_name} - {project_name}"


def status_color(status):
    return STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)


def clamp_percentage(value):
    if value is None:
        return None
    return max(0, min(100, int(round(float(value)))))


def format_hours(value):
    if not value:
        return None
    return ('%f' % value).rstrip('0').rstrip('.')


def _format_date(value):
    return value.strftime(DATE_FORMAT) if value else None


def _text(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def select_entries(entries, include_all_progress):
    """Entries arrive newest-first; keep the latest few unless all are wanted."""
    entries = list(entries)
    if include_all_progress:
        return entries
    return entries[:LATEST_ENTRY_COUNT]


def _entry_context(entry, include_file_list):
    return {
        'title': entry.title,
        'status': entry.current_status,
        'color': status_color(entry.current_status),
        'description': _text(entry.description),
        'start_date': _format_date(entry.start_date),
        'end_date': _format_date(entry.end_date),
        'completion': clamp_percentage(entry.completion_percentage),
        'hours': format_hours(entry.hours_worked),
        'milestones': _text(entry.milestones_achieved),
        'next_steps': _text(entry.next_steps),
        'blockers': _text(entry.blockers),
        'files': [f.original_name for f in entry.files] if include_file_list else [],
    }


def render_report(bundle, custom_message=None, include_all_progress=False,
                  include_file_list=False, subject=None, generated_at=None):
    """
    Render the progress report email.

    Args:
        bundle: ReportBundle from ReportAssembler.assemble (entries newest-first)
        custom_message: optional note shown in a highlighted block when non-blank
        include_all_progress: all entries instead of the latest three
        include_file_list: list attached file names under each entry
        subject: overrides the default subject when non-blank
        generated_at: footer timestamp; defaults to now (UTC)

    Returns:
        RenderedReport(subject, html)
    """
    assignment = bundle.assignment
    generated_at = generated_at or datetime.utcnow()

    final_subject = _text(subject) or default_subject(assignment.trainee_name,
                                                      assignment.project_name)

    entries = select_entries(bundle.entries, include_all_progress)

    html = render_template(
        'email/progress_report.html',
        assignment=assignment,
        details={
            'code': assignment.assignment_code,
            'trainee': assignment.trainee_name,
            'trainee_email': assignment.trainee_email,
            'project': assignment.project_name,
            'difficulty': assignment.difficulty_level or 'N/A',
            'batch': assignment.batch_number or 'N/A',
            'status': assignment.status,
            'start_date': _format_date(assignment.start_date),
            'expected_completion': _format_date(assignment.expected_completion_date),
            'actual_completion': _format_date(assignment.actual_completion_date),
        },
        project_description=_text(assignment.project_description),
        custom_message=_text(custom_message),
        entries=[_entry_context(e, include_file_list) for e in entries],
        scope_label='(All)' if include_all_progress else f'(Latest {LATEST_ENTRY_COUNT})',
        system_name=SYSTEM_NAME,
        generated_on=generated_at.strftime(TIMESTAMP_FORMAT),
    )
    return RenderedReport(subject=final_subject, html=html)
