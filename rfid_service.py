"""
RFID tag data access.

Every status change is a single conditional UPDATE whose WHERE clause carries
the expected current status. A zero rowcount means the tag is missing or in
the wrong state; callers report that instead of retrying.
"""
import logging

from extensions import db
from models import (RFIDTag, RFID_AVAILABLE, RFID_ASSIGNED, RFID_ACTIVE, RFID_LOST)

logger = logging.getLogger(__name__)


def find_rfid_by_uid(rfid_uid):
    return RFIDTag.query.filter_by(rfid_uid=rfid_uid).first()


def get_all_rfids():
    return RFIDTag.query.order_by(RFIDTag.id).all()


def get_available_rfids():
    return RFIDTag.query.filter_by(status=RFID_AVAILABLE).order_by(RFIDTag.id).all()


def create_rfid(rfid_uid):
    tag = RFIDTag(rfid_uid=rfid_uid, status=RFID_AVAILABLE)
    db.session.add(tag)
    db.session.commit()
    return tag


def _conditional_update(query, values, rfid_uid):
    updated = query.update(values, synchronize_session=False)
    db.session.commit()
    if not updated:
        return None
    return find_rfid_by_uid(rfid_uid)


def assign_rfid_to_guest(rfid_uid, guest_id):
    """available -> assigned"""
    query = RFIDTag.query.filter(RFIDTag.rfid_uid == rfid_uid,
                                 RFIDTag.status == RFID_AVAILABLE)
    tag = _conditional_update(query, {'guest_id': guest_id, 'status': RFID_ASSIGNED}, rfid_uid)
    if tag is None:
        logger.warning(f"[RFID] No row updated for {rfid_uid}, not 'available'")
    return tag


def activate_rfid(rfid_uid):
    """assigned -> active"""
    query = RFIDTag.query.filter(RFIDTag.rfid_uid == rfid_uid,
                                 RFIDTag.status == RFID_ASSIGNED)
    return _conditional_update(query, {'status': RFID_ACTIVE}, rfid_uid)


def mark_rfid_lost(rfid_uid):
    query = RFIDTag.query.filter(RFIDTag.rfid_uid == rfid_uid,
                                 RFIDTag.status != RFID_LOST)
    return _conditional_update(query, {'status': RFID_LOST}, rfid_uid)


def unassign_rfid(rfid_uid):
    query = RFIDTag.query.filter(RFIDTag.rfid_uid == rfid_uid,
                                 RFIDTag.status != RFID_AVAILABLE)
    return _conditional_update(query, {'guest_id': None, 'status': RFID_AVAILABLE}, rfid_uid)


def reset_rfid_by_guest(guest_id):
    """Return every assigned/active tag of a guest to the pool; returns the count"""
    updated = (RFIDTag.query
               .filter(RFIDTag.guest_id == guest_id,
                       RFIDTag.status.in_((RFID_ASSIGNED, RFID_ACTIVE)))
               .update({'guest_id': None, 'status': RFID_AVAILABLE},
                       synchronize_session=False))
    db.session.commit()
    logger.info(f"[RFID] Reset {updated} tag(s) for guest {guest_id}")
    return updated
