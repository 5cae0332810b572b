from datetime import datetime

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user

from .. import db
from ..errors import ValidationError
from ..models import User
from ..validation import require_fields, validate_email
from .tokens import issue_token

auth_bp = Blueprint('auth_bp', __name__, url_prefix='/api/auth')


def _token_response(user, message, status=200):
    return jsonify({
        'success': True,
        'message': message,
        'data': {'user': user.to_dict(), 'token': issue_token(user)}
    }), status


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    errors = require_fields(data, ['name', 'email', 'password'])
    if data.get('email') and not validate_email(data['email']):
        errors.append('"email" must be a valid email')
    if data.get('password') and len(data['password']) < 6:
        errors.append('"password" length must be at least 6 characters long')
    if errors:
        raise ValidationError(errors=errors)

    email = data['email'].strip().lower()
    if User.query.filter_by(email=email).first():
        raise ValidationError('User already exists with this email')

    user = User(
        name=data['name'].strip(),
        email=email,
        phone=data.get('phone'),
        department=data.get('department'),
        employee_id=data.get('employeeId'),
    )
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"Registered user {user.email}")

    return _token_response(user, 'User registered successfully', 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    errors = require_fields(data, ['email', 'password'])
    if errors:
        raise ValidationError(errors=errors)

    user = User.query.filter_by(email=data['email'].strip().lower(), is_active=True).first()
    if not user or not user.check_password(data['password']):
        return jsonify({'success': False, 'message': 'Invalid credentials'}), 401

    user.last_login = datetime.utcnow()
    db.session.commit()
    return _token_response(user, 'Login successful')


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'data': {'user': current_user.to_dict()}})
