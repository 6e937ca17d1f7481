"""
Room data access and the room half of the check-in/check-out lifecycle.
"""
import logging
import math
from datetime import timedelta

from errors import ValidationError
from extensions import db
from models import Room, ROOM_AVAILABLE, ROOM_RESERVED, ROOM_OCCUPIED, utcnow
from rfid_service import reset_rfid_by_guest

logger = logging.getLogger(__name__)

DEFAULT_STAY_HOURS = 1.0

ROOM_RESET_FIELDS = {
    'status': ROOM_AVAILABLE,
    'guest_id': None,
    'hours_stay': None,
    'registration_time': None,
    'check_in': None,
    'check_out': None,
}


def parse_hours_stay(value):
    """Validate a client-supplied hours_stay; must be a positive number"""
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ValidationError('Invalid hours_stay. Must be a positive decimal.')
    if isinstance(value, bool) or not math.isfinite(hours) or hours <= 0:
        raise ValidationError('Invalid hours_stay. Must be a positive decimal.')
    return hours


def stay_hours_or_default(value):
    """hours_stay as stored, falling back to one hour when unusable"""
    try:
        return parse_hours_stay(value)
    except ValidationError:
        logger.warning(f"[ROOMS] Invalid hours_stay ({value}). Defaulting to {DEFAULT_STAY_HOURS} hour.")
        return DEFAULT_STAY_HOURS


def find_room_by_number(room_number):
    return Room.query.filter_by(room_number=str(room_number)).first()


def find_room_by_guest_and_number(guest_id, room_number):
    return Room.query.filter_by(guest_id=guest_id, room_number=str(room_number)).first()


def find_active_rooms_for_guest(guest_id):
    """Rooms the guest currently holds (reserved or occupied)"""
    return (Room.query
            .filter(Room.guest_id == guest_id,
                    Room.status.in_((ROOM_RESERVED, ROOM_OCCUPIED)))
            .order_by(Room.id)
            .all())


def get_room_by_id(room_id):
    return db.session.get(Room, room_id)


def get_all_rooms():
    return Room.query.order_by(Room.room_number).all()


def get_occupied_rooms():
    return Room.query.filter_by(status=ROOM_OCCUPIED).order_by(Room.id).all()


def create_room(room_number, guest_id=None, hours_stay=None, now=None):
    room = Room(room_number=str(room_number), status=ROOM_AVAILABLE)
    if guest_id is not None and hours_stay is not None:
        room.guest_id = guest_id
        room.hours_stay = hours_stay
        room.status = ROOM_RESERVED
        room.registration_time = now or utcnow()
    db.session.add(room)
    db.session.commit()
    return room


def reserve_room(room_number, guest_id, hours_stay, now=None):
    """available -> reserved; returns None when no available room matched"""
    updated = (Room.query
               .filter(Room.room_number == str(room_number), Room.status == ROOM_AVAILABLE)
               .update({
                   'guest_id': guest_id,
                   'hours_stay': hours_stay,
                   'status': ROOM_RESERVED,
                   'registration_time': now or utcnow(),
               }, synchronize_session=False))
    db.session.commit()
    if not updated:
        return None
    return find_room_by_number(room_number)


def update_room(room_id, fields):
    updated = Room.query.filter_by(id=room_id).update(fields, synchronize_session=False)
    db.session.commit()
    if not updated:
        return None
    return get_room_by_id(room_id)


def delete_room(room_id):
    room = get_room_by_id(room_id)
    if not room:
        return None
    data = room.to_dict()
    db.session.delete(room)
    db.session.commit()
    return data


def occupy_room(room_id, hours_stay, now=None, check_in=None):
    """reserved -> occupied with check_out = check_in + hours_stay"""
    check_in = check_in or now or utcnow()
    check_out = check_in + timedelta(hours=hours_stay)
    updated = (Room.query
               .filter(Room.id == room_id, Room.status == ROOM_RESERVED)
               .update({
                   'status': ROOM_OCCUPIED,
                   'check_in': check_in,
                   'check_out': check_out,
               }, synchronize_session=False))
    db.session.commit()
    if not updated:
        return None
    return get_room_by_id(room_id)


def release_room(room_id, from_statuses=(ROOM_OCCUPIED,)):
    """Reset a room to available, clearing guest and stay fields in one statement"""
    updated = (Room.query
               .filter(Room.id == room_id, Room.status.in_(from_statuses))
               .update(dict(ROOM_RESET_FIELDS), synchronize_session=False))
    db.session.commit()
    return bool(updated)


def check_out_room(room, from_statuses=(ROOM_OCCUPIED,)):
    """Release the room and return the guest's tags to the pool"""
    guest_id = room.guest_id
    room_id = room.id
    if not release_room(room_id, from_statuses):
        return False
    if guest_id:
        reset_rfid_by_guest(guest_id)
    logger.info(f"[ROOMS] Room {room_id} checked out, now '{ROOM_AVAILABLE}'")
    return True
