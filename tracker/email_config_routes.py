from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user

from . import db
from .constants import ConfigTestStatus
from .errors import ValidationError, TransportError
from .models import EmailConfiguration
from .services.email_service import EmailService
from .validation import require_fields, validate_email, parse_bool, parse_int

email_config_bp = Blueprint('email_config', __name__, url_prefix='/api/email-config')


def _validate_config(data):
    errors = require_fields(data, ['emailAddress', 'smtpHost', 'smtpPort', 'smtpUsername', 'smtpPassword'])
    if data.get('emailAddress') and not validate_email(data['emailAddress']):
        errors.append('"emailAddress" must be a valid email')
    if data.get('smtpPort') is not None:
        port = parse_int(data['smtpPort'])
        if port is None or not 1 <= port <= 65535:
            errors.append('"smtpPort" must be between 1 and 65535')
    if errors:
        raise ValidationError(errors=errors)


@email_config_bp.route('', methods=['GET'])
@login_required
def get_email_config():
    config = EmailConfiguration.query.filter_by(user_id=current_user.id).first()
    return jsonify({
        'success': True,
        'data': {'emailConfiguration': config.to_dict() if config else None}
    })


@email_config_bp.route('', methods=['POST'])
@login_required
def save_email_config():
    data = request.get_json(silent=True) or {}
    _validate_config(data)

    config = EmailConfiguration.query.filter_by(user_id=current_user.id).first()
    if not config:
        config = EmailConfiguration(user_id=current_user.id)
        db.session.add(config)

    config.email_address = data['emailAddress'].strip()
    config.smtp_host = data['smtpHost'].strip()
    config.smtp_port = parse_int(data['smtpPort'])
    config.smtp_secure = parse_bool(data.get('smtpSecure'))
    config.smtp_username = data['smtpUsername'].strip()
    config.smtp_password = data['smtpPassword']
    config.is_configured = True
    config.test_status = ConfigTestStatus.NOT_TESTED
    db.session.commit()
    current_app.logger.info(f"Saved SMTP configuration for user {current_user.id} ({config.smtp_host}:{config.smtp_port})")

    return jsonify({
        'success': True,
        'message': 'Email configuration saved successfully',
        'data': {'emailConfiguration': config.to_dict()}
    })


@email_config_bp.route('/test', methods=['POST'])
@login_required
def test_email_config():
    try:
        message = EmailService.test_configuration(current_user.id)
    except TransportError as e:
        return jsonify({'success': False, 'message': f"Email test failed: {e}"}), 400
    return jsonify({'success': True, 'message': message})


@email_config_bp.route('/test-connection', methods=['POST'])
@login_required
def test_email_connection():
    try:
        message = EmailService.test_connection(current_user.id)
    except TransportError as e:
        return jsonify({'success': False, 'message': f"Connection test failed: {e}"}), 400
    return jsonify({'success': True, 'message': message})
