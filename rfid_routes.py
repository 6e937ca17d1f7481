import logging

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from access_control import verify_rfid
from auth import admin_required
from errors import DatabaseError, NotFound, ValidationError
from extensions import db
from models import Guest
from rfid_service import (activate_rfid, assign_rfid_to_guest, create_rfid, find_rfid_by_uid,
                          get_all_rfids, get_available_rfids, mark_rfid_lost, unassign_rfid)
from request_parsing import id_value, json_body

logger = logging.getLogger(__name__)

rfid_bp = Blueprint('rfid', __name__, url_prefix='/api/rfid')


def _required_uid(data, field='rfid_uid'):
    rfid_uid = data.get(field)
    if not rfid_uid:
        raise ValidationError(f'{field} is required.')
    return str(rfid_uid)


@rfid_bp.route('/all', methods=['GET'])
def get_all_rfid_tags():
    tags = get_all_rfids()
    return jsonify({
        'success': True,
        'message': 'All RFID tags fetched successfully',
        'data': [tag.to_dict() for tag in tags],
    }), 200


@rfid_bp.route('/available', methods=['GET'])
def get_available_rfid_tags():
    tags = get_available_rfids()
    return jsonify({
        'success': True,
        'message': 'Available RFID tags fetched successfully',
        'data': [tag.to_dict() for tag in tags],
    }), 200


@rfid_bp.route('', methods=['POST'])
@admin_required
def register_rfid_tag():
    """Add a new card to the pool as 'available'"""
    data = json_body()
    rfid_uid = _required_uid(data)

    if find_rfid_by_uid(rfid_uid):
        raise ValidationError(f'RFID {rfid_uid} is already registered.')

    try:
        tag = create_rfid(rfid_uid)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[RFID] Error registering {rfid_uid}: {e}")
        raise DatabaseError('Database error: Unable to register RFID')

    logger.info(f"[RFID] Registered new tag {rfid_uid}")
    return jsonify({
        'success': True,
        'message': 'RFID registered successfully (status: available)',
        'data': tag.to_dict(),
    }), 201


@rfid_bp.route('/assign', methods=['POST'])
def assign_rfid():
    data = json_body()
    guest_id = data.get('guest_id')
    rfid_uid = data.get('rfid_tag')

    if not guest_id or not rfid_uid:
        raise ValidationError('Guest ID and RFID UID are required.')

    guest = db.session.get(Guest, id_value(guest_id, 'guest_id'))
    if not guest:
        raise NotFound('Guest not found')

    tag = assign_rfid_to_guest(str(rfid_uid), guest.id)
    if tag is None:
        raise ValidationError('RFID is not in an available state or does not exist.')

    logger.info(f"[RFID] Tag {rfid_uid} assigned to guest {guest.id}")
    return jsonify({
        'success': True,
        'message': 'RFID assigned to guest successfully (status: assigned)',
        'data': tag.to_dict(),
    }), 201


@rfid_bp.route('/activate', methods=['POST'])
def activate_rfid_tag():
    data = json_body()
    rfid_uid = _required_uid(data)

    tag = activate_rfid(rfid_uid)
    if tag is None:
        raise ValidationError('RFID not found or not in assigned status.')

    return jsonify({
        'success': True,
        'message': 'RFID activated successfully (status: active)',
        'data': tag.to_dict(),
    }), 200


@rfid_bp.route('/lost', methods=['POST'])
def mark_rfid_as_lost():
    data = json_body()
    rfid_uid = _required_uid(data)

    tag = mark_rfid_lost(rfid_uid)
    if tag is None:
        raise ValidationError('RFID not found or already lost.')

    logger.info(f"[RFID] Tag {rfid_uid} marked lost")
    return jsonify({
        'success': True,
        'message': 'RFID status changed to lost',
        'data': tag.to_dict(),
    }), 200


@rfid_bp.route('/unassign', methods=['POST'])
def unassign_rfid_tag():
    data = json_body()
    rfid_uid = _required_uid(data)

    tag = unassign_rfid(rfid_uid)
    if tag is None:
        raise ValidationError('RFID not found or already available.')

    return jsonify({
        'success': True,
        'message': 'RFID unassigned successfully (status: available)',
        'data': tag.to_dict(),
    }), 200


@rfid_bp.route('/verify', methods=['POST'])
def verify():
    """Door reader endpoint: validate a tap and check the guest in on first entry"""
    data = json_body()
    rfid_uid = data.get('rfid_uid')
    if not rfid_uid:
        raise ValidationError('RFID UID is required.')

    room_number = data.get('room_number')
    logger.info(f"[VERIFY] Tap from {rfid_uid}, room {room_number or 'auto'}")

    result = verify_rfid(str(rfid_uid), room_number=room_number)
    return jsonify({
        'success': True,
        'message': 'RFID verified successfully.',
        'data': result,
    }), 200
