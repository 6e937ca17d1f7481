import logging

from flask import Blueprint, jsonify
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from auth import admin_required, create_admin_token, current_admin
from errors import AuthError, DatabaseError, ValidationError
from extensions import db
from models import Admin, ADMIN_ROLES
from request_parsing import json_body

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admins', __name__, url_prefix='/api/admins')
auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _check_unique(username=None, email=None, exclude_id=None):
    filters = []
    if username:
        filters.append(Admin.username == username)
    if email:
        filters.append(Admin.email == email)
    if not filters:
        return
    existing = Admin.query.filter(or_(*filters)).first()
    if existing and existing.id != exclude_id:
        raise ValidationError('An admin with this username or email already exists.')


@admin_bp.route('/create', methods=['POST'])
def create_admin():
    """Create an admin; the first one may be created without a token"""
    data = json_body()
    username = data.get('username')
    email = data.get('email')
    password = data.get('password')
    role = data.get('role') or 'admin'

    if not username or not password or not email:
        raise ValidationError('All fields are required')
    if role not in ADMIN_ROLES:
        raise ValidationError('Invalid role provided.')

    has_admins = db.session.query(Admin.id).first() is not None
    if has_admins and current_admin() is None:
        raise AuthError('Admin authentication required')

    _check_unique(username, email)

    admin = Admin(username=username, email=email, role=role)
    admin.set_password(password)
    try:
        db.session.add(admin)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[ADMIN] Error creating admin {username}: {e}")
        raise DatabaseError('Database error: Unable to create admin')

    logger.info(f"[ADMIN] Admin created successfully: {username}")
    return jsonify({'success': True, 'message': 'Admin created successfully', 'data': admin.to_dict()}), 201


@admin_bp.route('/login', methods=['POST'])
@auth_bp.route('/login', methods=['POST'])
def login_admin():
    """Log in with username or email; returns a JWT carrying admin_id and role"""
    data = json_body()
    identifier = data.get('identifier')
    password = data.get('password')

    if not identifier or not password:
        raise ValidationError('Username/Email and password are required')

    logger.info(f"[LOGIN] Admin login attempt: {identifier}")
    admin = Admin.query.filter(or_(Admin.username == identifier, Admin.email == identifier)).first()
    if not admin or not admin.check_password(password):
        logger.warning(f"[LOGIN] Invalid admin credentials for {identifier}")
        raise AuthError('Invalid credentials')

    logger.info(f"[LOGIN] Admin login successful: {admin.username}")
    return jsonify({
        'success': True,
        'message': 'Login successful',
        'admin': admin.to_dict(),
        'token': create_admin_token(admin),
    }), 200


@admin_bp.route('/change_password', methods=['POST'])
@admin_required
def change_admin_password():
    data = json_body()
    current_password = data.get('current_password')
    new_password = data.get('new_password')
    if not current_password or not new_password:
        raise ValidationError('All fields are required.')

    admin = current_admin()
    if not admin.check_password(current_password):
        raise AuthError('Incorrect current password.')

    admin.set_password(new_password)
    db.session.commit()
    logger.info(f"[ADMIN] Admin {admin.id} changed password")
    return jsonify({'success': True, 'message': 'Password updated successfully.'}), 200


@admin_bp.route('/edit_profile', methods=['POST'])
@admin_required
def update_admin_profile():
    data = json_body()
    username = data.get('username')
    email = data.get('email')
    role = data.get('role')

    if role and role not in ADMIN_ROLES:
        raise ValidationError('Invalid role provided.')
    if not (username or email or role):
        raise ValidationError('No valid fields provided for update.')

    admin = current_admin()
    _check_unique(username, email, exclude_id=admin.id)

    if username:
        admin.username = username
    if email:
        admin.email = email
    if role:
        admin.role = role
    db.session.commit()

    logger.info(f"[ADMIN] Admin (ID: {admin.id}) profile updated successfully.")
    return jsonify({
        'success': True,
        'message': 'Admin profile updated successfully.',
        'data': admin.to_dict(),
    }), 200


@admin_bp.route('/upload_avatar', methods=['POST'])
@admin_required
def upload_admin_avatar():
    data = json_body()
    avatar_url = data.get('avatar_url')
    if not avatar_url:
        raise ValidationError('avatar_url is required.')

    admin = current_admin()
    admin.avatar_url = avatar_url
    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Admin avatar updated successfully.',
        'data': admin.to_dict(),
    }), 200


@admin_bp.route('/sign_out', methods=['POST'])
@admin_required
def sign_out_admin():
    logger.info(f"[LOGOUT] Admin {current_admin().id} signed out")
    return jsonify({'success': True, 'message': 'Admin signed out successfully.'}), 200


@admin_bp.route('', methods=['GET'])
@admin_required
def get_all_admins():
    admins = Admin.query.order_by(Admin.id).all()
    return jsonify({
        'success': True,
        'message': 'Admins fetched successfully.',
        'admins': [admin.to_dict() for admin in admins],
    }), 200
