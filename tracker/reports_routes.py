from datetime import datetime

from flask import Blueprint, request, jsonify, current_app, Response
from flask_login import login_required, current_user

from .errors import ValidationError
from .services.report_assembler import ReportAssembler
from .services.report_renderer import render_report
from .services.email_service import EmailService, attachments_from_bundle
from .services.email_history import EmailHistoryService, HistoryFilters
from .validation import require_fields, parse_bool, parse_int, parse_datetime

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')


def _prepare_report(data, require_recipients):
    """
    Assemble and render a report from a send/preview request body.

    Preview and send both go through here so the previewed email is the one
    that gets delivered and logged.
    """
    errors = require_fields(data, ['traineeId', 'projectId'])
    admin_ids = data.get('adminIds') or []
    if not isinstance(admin_ids, list):
        errors.append('"adminIds" must be an array')
        admin_ids = []
    if require_recipients and not admin_ids:
        errors.append('"adminIds" must contain at least 1 item')
    if errors:
        raise ValidationError('Trainee ID, Project ID, and admin IDs are required', errors=errors)

    bundle = ReportAssembler.assemble(
        current_user.id,
        data['traineeId'],
        data['projectId'],
        admin_ids=admin_ids,
        require_recipients=require_recipients or bool(admin_ids)
    )
    include_files = parse_bool(data.get('includeFiles'))
    rendered = render_report(
        bundle,
        custom_message=data.get('customMessage'),
        include_all_progress=parse_bool(data.get('includeAllProgress')),
        include_file_list=include_files,
        subject=data.get('subject'),
        generated_at=parse_datetime(data.get('generatedAt'))
    )
    return bundle, rendered, include_files


@reports_bp.route('/send', methods=['POST'])
@login_required
def send_report():
    data = request.get_json(silent=True) or {}
    bundle, rendered, include_files = _prepare_report(data, require_recipients=True)

    attachments = []
    if include_files:
        attachments = attachments_from_bundle(bundle, current_app.config['UPLOAD_FOLDER'])

    result = EmailService.send_report(
        current_user.id, rendered.subject, rendered.html, bundle.recipients, attachments
    )

    return jsonify({
        'success': True,
        'message': 'Progress report sent successfully',
        'data': {
            'emailResults': [o.to_dict() for o in result.outcomes],
            'attachmentCount': result.attachment_count,
        }
    })


@reports_bp.route('/preview', methods=['POST'])
@login_required
def preview_report():
    data = request.get_json(silent=True) or {}
    bundle, rendered, include_files = _prepare_report(data, require_recipients=False)

    attachments = []
    if include_files:
        for entry in bundle.entries:
            for f in entry.files:
                attachments.append({
                    'id': f.id,
                    'filename': f.original_name,
                    'size': f.file_size,
                    'type': f.mime_type,
                })

    return jsonify({
        'success': True,
        'message': 'Email preview generated successfully',
        'data': {
            'recipients': [f"{r.name} <{r.email}>" for r in bundle.recipients],
            'subject': rendered.subject,
            'htmlContent': rendered.html,
            'attachments': attachments,
            'trainee': {
                'name': bundle.assignment.trainee_name,
                'email': bundle.assignment.trainee_email,
            },
            'project': {'name': bundle.assignment.project_name},
        }
    })


def _history_filters(args):
    return HistoryFilters(
        status=args.get('status'),
        recipient_email=args.get('recipientEmail'),
        start_date=parse_datetime(args.get('startDate')),
        end_date=parse_datetime(args.get('endDate')),
        search=args.get('search'),
    )


@reports_bp.route('/email-history', methods=['GET'])
@login_required
def email_history():
    page = parse_int(request.args.get('page'), default=1, minimum=1)
    limit = parse_int(request.args.get('limit'),
                      default=current_app.config.get('EMAIL_HISTORY_PAGE_SIZE', 10), minimum=1)

    data = EmailHistoryService.paginate(current_user.id, _history_filters(request.args),
                                        page=page, limit=limit)
    data['statistics'] = EmailHistoryService.statistics(current_user.id)
    data['recentActivity'] = EmailHistoryService.recent_activity(
        current_user.id, days=current_app.config.get('EMAIL_ACTIVITY_DAYS', 30))

    return jsonify({'success': True, 'data': data})


@reports_bp.route('/email-history', methods=['DELETE'])
@login_required
def delete_email_history():
    email_id = request.args.get('id')
    bulk = parse_bool(request.args.get('bulk'))
    older_than = request.args.get('olderThan')

    if bulk and older_than:
        days = parse_int(older_than, minimum=0)
        deleted = EmailHistoryService.delete_older_than(current_user.id, days)
        return jsonify({
            'success': True,
            'message': f"Deleted {deleted} email records older than {days} days",
            'data': {'deletedCount': deleted},
        })

    if email_id:
        EmailHistoryService.delete(current_user.id, email_id)
        return jsonify({'success': True, 'message': 'Email record deleted successfully'})

    raise ValidationError('Email ID or bulk delete parameters required')


@reports_bp.route('/email-history/<email_id>', methods=['GET'])
@login_required
def get_email_record(email_id):
    email_log = EmailHistoryService.get(current_user.id, email_id)
    return jsonify({'success': True, 'data': email_log.to_dict(include_body=True)})


@reports_bp.route('/email-history/<email_id>', methods=['PATCH'])
@login_required
def update_email_record(email_id):
    data = request.get_json(silent=True) or {}
    email_log = EmailHistoryService.update_status(
        current_user.id, email_id, data.get('status'), data.get('errorMessage'))
    return jsonify({
        'success': True,
        'message': 'Email record updated successfully',
        'data': email_log.to_dict(include_body=True),
    })


@reports_bp.route('/email-history/<email_id>', methods=['DELETE'])
@login_required
def delete_email_record(email_id):
    EmailHistoryService.delete(current_user.id, email_id)
    return jsonify({'success': True, 'message': 'Email record deleted successfully'})


@reports_bp.route('/email-history/export', methods=['GET'])
@login_required
def export_email_history():
    export_format = (request.args.get('format') or 'json').lower()
    if export_format not in ('json', 'csv'):
        raise ValidationError('Format must be json or csv')

    filters = _history_filters(request.args)
    if export_format == 'csv':
        rows = EmailHistoryService.export_rows(current_user.id, filters)
        filename = f"email-history-{datetime.utcnow().strftime('%Y-%m-%d')}.csv"
        return Response(
            EmailHistoryService.to_csv(rows),
            mimetype='text/csv',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'}
        )

    records = [e.to_dict() for e in EmailHistoryService.query(current_user.id, filters).all()]
    return jsonify({
        'success': True,
        'data': records,
        'exportedAt': datetime.utcnow().isoformat(),
        'totalRecords': len(records),
    })


@reports_bp.route('/email-history/retry', methods=['POST'])
@login_required
def retry_email():
    data = request.get_json(silent=True) or {}
    email_id = data.get('emailId')
    if not email_id:
        raise ValidationError('Email ID is required')

    success, email_log = EmailHistoryService.retry(current_user.id, email_id)
    if not success:
        return jsonify({
            'success': False,
            'message': 'Failed to resend email',
            'error': email_log.error_message,
        }), 500

    return jsonify({
        'success': True,
        'message': 'Email resent successfully',
        'data': email_log.to_dict(),
    })
