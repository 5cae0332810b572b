"""
Resolve the caller from an ``Authorization: Bearer <token>`` header.

Flask-Login's request loader is the single authentication guard: routes only
declare ``@login_required`` and read ``current_user``.
"""
from flask import current_app, g, request
from itsdangerous import URLSafeTimedSerializer as Serializer, BadSignature, SignatureExpired

from .. import db, login_manager
from ..errors import AuthenticationError
from ..models.user import User

MISSING_TOKEN = 'missing'
INVALID_TOKEN = 'invalid'
INACTIVE_USER = 'inactive'

_FAILURES = {
    MISSING_TOKEN: (401, 'Access token required'),
    INVALID_TOKEN: (403, 'Invalid or expired token'),
    INACTIVE_USER: (401, 'Invalid or inactive user'),
}


def issue_token(user):
    return user.get_auth_token()


def verify_token(token):
    """Return the user id carried by a token, or raise BadSignature/SignatureExpired."""
    s = Serializer(current_app.config['SECRET_KEY'], salt='auth-token')
    data = s.loads(token, max_age=current_app.config['TOKEN_EXPIRES_SECONDS'])
    return data.get('user_id')


def _bearer_token():
    header = request.headers.get('Authorization', '')
    parts = header.split(' ', 1)
    if len(parts) == 2 and parts[0].lower() == 'bearer' and parts[1].strip():
        return parts[1].strip()
    return None


@login_manager.user_loader
def load_user(user_id):
    user = db.session.get(User, user_id)
    if user and user.is_active:
        return user
    return None


@login_manager.request_loader
def load_user_from_request(req):
    token = _bearer_token()
    if not token:
        g.auth_failure = MISSING_TOKEN
        return None

    try:
        user_id = verify_token(token)
    except (BadSignature, SignatureExpired):
        g.auth_failure = INVALID_TOKEN
        return None

    user = db.session.get(User, user_id) if user_id else None
    if not user or not user.is_active:
        g.auth_failure = INACTIVE_USER
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    status, message = _FAILURES[g.get('auth_failure', MISSING_TOKEN)]
    raise AuthenticationError(message, status_code=status)
