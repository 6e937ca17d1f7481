import logging

from flask import Blueprint, request, jsonify
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from auth import admin_required, create_guest_token, token_required
from errors import AuthError, DatabaseError, NotFound, ValidationError
from extensions import db
from models import Guest, utcnow
from request_parsing import json_body

logger = logging.getLogger(__name__)

guest_bp = Blueprint('guests', __name__, url_prefix='/api/guests')

PROFILE_FIELDS = ('name', 'email', 'phone', 'membership_level', 'avatar_url')


def _get_guest_or_404(guest_id):
    guest = db.session.get(Guest, guest_id)
    if not guest:
        raise NotFound('Guest not found.')
    return guest


@guest_bp.route('/register', methods=['POST'])
def register_guest():
    """Register a new guest with optional membership level"""
    data = json_body()
    name = data.get('name')
    email = data.get('email')
    phone = data.get('phone')
    password = data.get('password')

    if not name or not email or not phone or not password:
        raise ValidationError('Name, email, phone, and password are required.')

    logger.info(f"[REGISTER] Registration attempt for: {email}")

    if Guest.query.filter_by(email=email).first():
        raise ValidationError('Email already registered.')

    guest = Guest(
        name=name,
        email=email,
        phone=str(phone),
        membership_level=data.get('membership_level') or 'Regular',
        membership_start=utcnow(),
        membership_renewals=0,
    )
    guest.set_password(password)

    try:
        db.session.add(guest)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[REGISTER] Database insert error: {e}")
        raise DatabaseError('Database error: Unable to register guest.')

    logger.info(f"[REGISTER] Guest {guest.id} registered")
    return jsonify({
        'success': True,
        'message': 'Guest registered successfully.',
        'data': guest.to_dict(),
    }), 201


@guest_bp.route('/login', methods=['POST'])
def login_guest():
    """Log in with email or phone; several guests may share one phone number"""
    data = json_body()
    identifier = data.get('identifier')
    password = data.get('password')

    if not identifier or not password:
        raise ValidationError('Identifier (email or phone) and password are required.')

    identifier = str(identifier)
    if '@' in identifier:
        candidates = Guest.query.filter_by(email=identifier).all()
    else:
        candidates = Guest.query.filter_by(phone=identifier).order_by(Guest.id).all()

    if not candidates:
        raise NotFound('Guest not found.')

    guest = next((c for c in candidates if c.check_password(password)), None)
    if guest is None:
        logger.warning(f"[LOGIN] Invalid credentials for guest identifier {identifier}")
        raise AuthError('Invalid credentials.')

    logger.info(f"[LOGIN] Guest {guest.id} logged in")
    return jsonify({
        'success': True,
        'message': 'Guest logged in successfully.',
        'guest': guest.to_dict(),
        'token': create_guest_token(guest),
    }), 200


@guest_bp.route('/me', methods=['GET'])
@token_required
def get_current_guest(guest_id):
    guest = _get_guest_or_404(guest_id)
    return jsonify({'success': True, 'message': 'Guest fetched successfully.', 'data': guest.to_dict()}), 200


@guest_bp.route('/<int:guest_id>', methods=['GET'])
def get_guest_profile(guest_id):
    guest = _get_guest_or_404(guest_id)
    return jsonify({'success': True, 'message': 'Guest fetched successfully.', 'data': guest.to_dict()}), 200


@guest_bp.route('/change_password', methods=['POST'])
@token_required
def change_guest_password(guest_id):
    data = json_body()
    current_password = data.get('current_password')
    new_password = data.get('new_password')

    if not current_password or not new_password:
        raise ValidationError('current_password and new_password are required.')

    guest = _get_guest_or_404(guest_id)
    if not guest.check_password(current_password):
        raise AuthError('Invalid current password.')

    guest.set_password(new_password)
    db.session.commit()

    logger.info(f"[PROFILE] Guest {guest_id} changed password")
    return jsonify({'success': True, 'message': 'Guest password changed successfully.'}), 200


@guest_bp.route('/edit_profile', methods=['POST'])
@token_required
def update_guest_profile(guest_id):
    data = json_body()
    fields = {key: data[key] for key in PROFILE_FIELDS if data.get(key)}
    if not fields:
        raise ValidationError('No valid fields provided for update.')

    guest = _get_guest_or_404(guest_id)
    if 'email' in fields:
        other = Guest.query.filter_by(email=fields['email']).first()
        if other and other.id != guest.id:
            raise ValidationError('Email already registered.')

    for key, value in fields.items():
        setattr(guest, key, value)
    db.session.commit()

    return jsonify({
        'success': True,
        'message': 'Guest profile updated successfully.',
        'data': guest.to_dict(),
    }), 200


@guest_bp.route('/upload_avatar', methods=['POST'])
@token_required
def upload_guest_avatar(guest_id):
    data = json_body()
    avatar_url = data.get('avatar_url')
    if not avatar_url:
        raise ValidationError('avatar_url is required.')

    guest = _get_guest_or_404(guest_id)
    guest.avatar_url = avatar_url
    db.session.commit()

    logger.info(f"[PROFILE] Guest {guest_id} avatar updated")
    return jsonify({
        'success': True,
        'message': 'Guest avatar updated successfully.',
        'data': guest.to_dict(),
    }), 200


@guest_bp.route('/sign_out', methods=['POST'])
@token_required
def sign_out_guest(guest_id):
    # Tokens are stateless; the client drops its copy
    logger.info(f"[LOGOUT] Guest {guest_id} signed out")
    return jsonify({'success': True, 'message': 'Guest signed out successfully.'}), 200


@guest_bp.route('/search', methods=['GET'])
@admin_required
def search_guests():
    """Search guests by name, email, or phone"""
    query = (request.args.get('query') or '').strip()
    if not query:
        raise ValidationError('Query string is required.')

    pattern = f'%{query}%'
    guests = (Guest.query
              .filter(or_(Guest.name.ilike(pattern),
                          Guest.email.ilike(pattern),
                          Guest.phone.ilike(pattern)))
              .order_by(Guest.id)
              .all())
    if not guests:
        raise NotFound('No matching guest found.')

    return jsonify({
        'success': True,
        'message': f'{len(guests)} guest(s) found.',
        'guests': [guest.to_dict() for guest in guests],
    }), 200


@guest_bp.route('', methods=['GET'])
@admin_required
def get_all_guests():
    guests = Guest.query.order_by(Guest.id).all()
    return jsonify({
        'success': True,
        'message': 'Guests fetched successfully.',
        'guests': [guest.to_dict() for guest in guests],
    }), 200
