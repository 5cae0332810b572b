from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from .errors import NotFound, TransportError
from .models import Admin
from .services.email_service import EmailService

admins_bp = Blueprint('admins', __name__, url_prefix='/api/admins')


@admins_bp.route('', methods=['GET'])
@login_required
def list_admins():
    admins = Admin.query.filter_by(user_id=current_user.id, is_active=True).order_by(
        Admin.is_default.desc(), Admin.name).all()
    return jsonify({'success': True, 'data': {'admins': [a.to_dict() for a in admins]}})


@admins_bp.route('/<admin_id>/test-email', methods=['POST'])
@login_required
def send_admin_test_email(admin_id):
    admin = Admin.query.filter_by(id=admin_id, user_id=current_user.id, is_active=True).first()
    if not admin:
        raise NotFound('Admin not found')

    try:
        EmailService.send_test_email_to_admin(current_user.id, admin)
    except TransportError as e:
        return jsonify({'success': False, 'message': f"Failed to send test email: {e}"}), 400

    return jsonify({'success': True, 'message': f"Test email sent successfully to {admin.email}"})
