import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from auth import admin_required
from errors import DatabaseError, NotFound, ValidationError
from extensions import db
from models import Guest, ROOM_OCCUPIED, ROOM_RESERVED, ROOM_STATUSES
from request_parsing import id_value, json_body, optional_id
from room_service import (check_out_room, create_room, delete_room, find_room_by_number,
                          get_all_rooms, get_room_by_id, occupy_room, parse_hours_stay,
                          reserve_room, stay_hours_or_default, update_room)

logger = logging.getLogger(__name__)

room_bp = Blueprint('rooms', __name__, url_prefix='/api/rooms')

UPDATABLE_FIELDS = ('room_number', 'status', 'guest_id', 'hours_stay')


def _parse_timestamp(value, field):
    """ISO-8601 string to the naive UTC form the columns store"""
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f'Invalid {field}. Use ISO-8601 format.')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _require_room(room_id):
    room = get_room_by_id(room_id)
    if not room:
        raise NotFound('Room not found')
    return room


@room_bp.route('', methods=['POST'])
@admin_required
def add_room():
    """Create a room; reserved for a guest when guest_id and hours_stay are given"""
    data = json_body()
    room_number = data.get('room_number')
    guest_id = optional_id(data, 'guest_id')
    hours_stay = data.get('hours_stay')

    if not room_number:
        raise ValidationError('Missing required field: room_number.')

    if hours_stay is not None:
        hours_stay = parse_hours_stay(hours_stay)
    if guest_id is not None and not db.session.get(Guest, guest_id):
        raise NotFound('Guest not found')

    if find_room_by_number(room_number):
        raise ValidationError(f'Room number {room_number} already exists.')

    try:
        room = create_room(room_number, guest_id=guest_id, hours_stay=hours_stay)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[ROOMS] Error inserting room {room_number}: {e}")
        raise DatabaseError('Database error: Error inserting room data')

    logger.info(f"[ROOMS] Created room {room.room_number} (status={room.status})")
    return jsonify({
        'success': True,
        'message': f'Room created successfully (status={room.status})',
        'data': room.to_dict(),
    }), 201


@room_bp.route('/assign', methods=['PUT'])
def assign_room_by_number():
    """Reserve an available room for a guest"""
    data = json_body()
    room_number = data.get('room_number')
    guest_id = data.get('guest_id')
    hours_stay = data.get('hours_stay')

    if not room_number or not guest_id or hours_stay is None:
        raise ValidationError('Missing required fields: room_number, guest_id, hours_stay.')

    hours_stay = parse_hours_stay(hours_stay)
    guest_id = id_value(guest_id, 'guest_id')
    if not db.session.get(Guest, guest_id):
        raise NotFound('Guest not found')

    room = reserve_room(room_number, guest_id, hours_stay)
    if room is None:
        raise ValidationError(f'No available room found with room_number = {room_number}')

    logger.info(f"[ROOMS] Room {room_number} reserved for guest {guest_id} ({hours_stay}h)")
    return jsonify({
        'success': True,
        'message': 'Room reserved (status=reserved) successfully',
        'data': room.to_dict(),
    }), 200


@room_bp.route('', methods=['GET'])
def get_rooms():
    rooms = get_all_rooms()
    return jsonify({
        'success': True,
        'message': 'Rooms fetched successfully',
        'data': [room.to_dict() for room in rooms],
    }), 200


@room_bp.route('/<int:room_id>', methods=['GET'])
def get_room(room_id):
    room = _require_room(room_id)
    return jsonify({'success': True, 'message': 'Room fetched successfully', 'data': room.to_dict()}), 200


@room_bp.route('/<int:room_id>', methods=['PUT'])
@admin_required
def modify_room(room_id):
    data = json_body()
    fields = {key: data[key] for key in UPDATABLE_FIELDS if key in data}
    if not fields:
        raise ValidationError('No update fields provided.')

    room = _require_room(room_id)

    if 'hours_stay' in fields and fields['hours_stay'] is not None:
        fields['hours_stay'] = parse_hours_stay(fields['hours_stay'])
    if 'status' in fields and fields['status'] not in ROOM_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(ROOM_STATUSES)}.")
    if 'room_number' in fields:
        fields['room_number'] = str(fields['room_number'])
        existing = find_room_by_number(fields['room_number'])
        if existing and existing.id != room_id:
            raise ValidationError(f"Room number {fields['room_number']} already exists.")
    if 'guest_id' in fields:
        fields['guest_id'] = optional_id(fields, 'guest_id')
    if fields.get('guest_id') is not None and not db.session.get(Guest, fields['guest_id']):
        raise NotFound('Guest not found')

    # Reserved and occupied rooms belong to a guest; available and maintenance rooms do not
    status = fields.get('status', room.status)
    guest_id = fields['guest_id'] if 'guest_id' in fields else room.guest_id
    if status in (ROOM_RESERVED, ROOM_OCCUPIED) and guest_id is None:
        raise ValidationError(f"Room status '{status}' requires a guest_id.")
    if status not in (ROOM_RESERVED, ROOM_OCCUPIED) and guest_id is not None:
        raise ValidationError(f"Room status '{status}' cannot have a guest_id.")

    room = update_room(room_id, fields)
    if room is None:
        raise NotFound('Room not found')

    return jsonify({'success': True, 'message': 'Room updated successfully', 'data': room.to_dict()}), 200


@room_bp.route('/<int:room_id>', methods=['DELETE'])
@admin_required
def remove_room(room_id):
    data = delete_room(room_id)
    if data is None:
        raise NotFound('Room not found')
    logger.info(f"[ROOMS] Deleted room {data['room_number']}")
    return jsonify({'success': True, 'message': 'Room deleted successfully', 'data': data}), 200


@room_bp.route('/<int:room_id>/checkin', methods=['POST'])
def room_check_in(room_id):
    """Front-desk check-in: reserved -> occupied"""
    data = json_body()
    room = _require_room(room_id)
    if room.status != ROOM_RESERVED:
        raise ValidationError(f"Room {room.room_number} is not reserved (status: {room.status}).")

    check_in = _parse_timestamp(data['check_in'], 'check_in') if data.get('check_in') else None
    hours_stay = stay_hours_or_default(room.hours_stay)

    occupied = occupy_room(room_id, hours_stay, check_in=check_in)
    if occupied is None:
        raise ValidationError(f"Room {room.room_number} is no longer reserved.")

    logger.info(f"[ROOMS] Room {occupied.room_number} checked in until {occupied.check_out.isoformat()}")
    return jsonify({'success': True, 'message': 'Check-in successful', 'data': occupied.to_dict()}), 200


@room_bp.route('/<int:room_id>/checkout', methods=['POST'])
def room_check_out(room_id):
    """Front-desk check-out; same reset as the auto-checkout job"""
    room = _require_room(room_id)
    room_number = room.room_number

    if not check_out_room(room, from_statuses=(ROOM_OCCUPIED, ROOM_RESERVED)):
        raise ValidationError(f"Room {room_number} is not occupied or reserved.")

    room = get_room_by_id(room_id)
    return jsonify({'success': True, 'message': 'Check-out successful', 'data': room.to_dict()}), 200
