import logging
from datetime import timedelta
from functools import wraps

import jwt
from flask import current_app, request, jsonify

from extensions import db
from models import Admin, Guest, utcnow

logger = logging.getLogger(__name__)

JWT_ALGORITHM = 'HS256'
GUEST_TOKEN_LIFETIME = timedelta(days=7)


def create_admin_token(admin):
    hours = current_app.config['ACCESS_TOKEN_EXPIRY_HOURS']
    payload = {
        'admin_id': admin.id,
        'role': admin.role,
        'exp': utcnow() + timedelta(hours=hours),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm=JWT_ALGORITHM)


def create_guest_token(guest):
    payload = {
        'guest_id': guest.id,
        'email': guest.email,
        'exp': utcnow() + GUEST_TOKEN_LIFETIME,
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm=JWT_ALGORITHM)


def _bearer_token():
    token = request.headers.get('Authorization')
    if token and token.startswith('Bearer '):
        token = token[7:]
    return token


def decode_token(token):
    return jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=[JWT_ALGORITHM])


def current_admin():
    """Admin for the request's bearer token, or None when absent/invalid"""
    token = _bearer_token()
    if not token:
        return None
    try:
        data = decode_token(token)
    except jwt.InvalidTokenError:
        return None
    admin_id = data.get('admin_id')
    return db.session.get(Admin, admin_id) if admin_id else None


def admin_required(f):
    """Decorator to require admin authentication via JWT token"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({'success': False, 'message': 'Authentication required'}), 401

        try:
            data = decode_token(token)
        except jwt.ExpiredSignatureError:
            return jsonify({'success': False, 'message': 'Token expired'}), 401
        except jwt.InvalidTokenError:
            logger.warning(f"[ADMIN_AUTH] Invalid token for {f.__name__}")
            return jsonify({'success': False, 'message': 'Invalid token'}), 401

        admin_id = data.get('admin_id')
        if not admin_id:
            return jsonify({'success': False, 'message': 'Admin access required'}), 403

        admin = db.session.get(Admin, admin_id)
        if not admin:
            return jsonify({'success': False, 'message': 'Admin not found'}), 404

        return f(*args, **kwargs)

    return decorated_function


def token_required(f):
    """Decorator to require a guest JWT; passes the guest id as first argument"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({'success': False, 'message': 'Token is missing'}), 401

        try:
            data = decode_token(token)
        except jwt.ExpiredSignatureError:
            return jsonify({'success': False, 'message': 'Token expired'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'success': False, 'message': 'Invalid token'}), 401

        guest_id = data.get('guest_id')
        if not guest_id:
            return jsonify({'success': False, 'message': 'Guest access required'}), 403
        if not db.session.get(Guest, guest_id):
            return jsonify({'success': False, 'message': 'Guest not found'}), 404

        return f(guest_id, *args, **kwargs)

    return decorated_function
