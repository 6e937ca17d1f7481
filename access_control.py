"""
Door access verification for RFID taps.

verify_rfid() ties a tag to its guest and the guest's room, moving a
reserved room to occupied on first entry and an assigned tag to active.
A stay past check_out plus the auto-checkout grace is checked out on the
spot and the tap is refused.
"""
import logging

from checkout_scheduler import auto_check_out_room, stay_expired
from errors import (AccessDenied, AmbiguousRoom, Conflict, InvalidState, NoRoom,
                    NotFound, StayExpired, Unassigned)
from extensions import db
from models import (Guest, RFID_ACTIVE, RFID_ASSIGNED, ROOM_OCCUPIED, ROOM_RESERVED,
                    utcnow)
from rfid_service import activate_rfid, find_rfid_by_uid
from room_service import (find_active_rooms_for_guest, find_room_by_guest_and_number,
                          occupy_room, stay_hours_or_default)

logger = logging.getLogger(__name__)


def resolve_room(guest_id, room_number=None):
    """Explicit room number, or the guest's only reserved/occupied room"""
    if room_number:
        return str(room_number)

    candidates = find_active_rooms_for_guest(guest_id)
    if not candidates:
        raise NoRoom('No reserved/occupied room found for this guest.')
    if len(candidates) > 1:
        raise AmbiguousRoom('Multiple rooms found for this guest. Please specify a room_number.')
    return candidates[0].room_number


def verify_rfid(rfid_uid, room_number=None, now=None, grace_minutes=None):
    """Validate a tap and apply the check-in transitions; returns {rfid, guest, room}"""
    now = now or utcnow()

    tag = find_rfid_by_uid(rfid_uid)
    if not tag:
        raise NotFound('RFID not found.')
    if tag.status not in (RFID_ASSIGNED, RFID_ACTIVE):
        raise InvalidState(f'RFID is found but not valid for entry (status: {tag.status}).')
    if not tag.guest_id:
        raise Unassigned('RFID is not assigned to any guest.')

    guest = db.session.get(Guest, tag.guest_id)
    if not guest:
        raise NotFound('Guest not found.')

    target_room_number = resolve_room(guest.id, room_number)
    room = find_room_by_guest_and_number(guest.id, target_room_number)
    if not room or room.status not in (ROOM_RESERVED, ROOM_OCCUPIED):
        raise AccessDenied(f'Access denied: Guest has not reserved room {target_room_number}.')

    if room.status == ROOM_OCCUPIED and room.check_out and stay_expired(room, now, grace_minutes):
        logger.info(f"[VERIFY] Stay in room {room.room_number} expired, checking out")
        auto_check_out_room(room)
        raise StayExpired(f'Stay in room {target_room_number} has ended.')

    if room.status == ROOM_RESERVED:
        hours_stay = stay_hours_or_default(room.hours_stay)
        occupied = occupy_room(room.id, hours_stay, now=now)
        if occupied is None:
            raise Conflict(f'Room {target_room_number} is no longer reserved.')
        room = occupied
        logger.info(f"[VERIFY] Room {room.room_number} checked in until {room.check_out.isoformat()}")
    else:
        logger.debug(f"[VERIFY] Room {room.room_number} is already '{room.status}'")

    if tag.status == RFID_ASSIGNED:
        activated = activate_rfid(rfid_uid)
        if activated is None:
            raise Conflict('RFID changed state during verification.')
        tag = activated

    return {
        'rfid': tag.to_dict(),
        'guest': guest.to_dict(),
        'room': room.to_dict(),
    }
