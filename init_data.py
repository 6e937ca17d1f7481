"""
Initialize database with starter data for the guest management backend
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Admin, Room, RFIDTag, ROOM_AVAILABLE, RFID_AVAILABLE

logger = logging.getLogger(__name__)

DEFAULT_ADMIN = {
    'username': 'admin',
    'email': 'admin@hotel.com',
    'password': 'admin123',
    'role': 'superadmin',
}
DEFAULT_ROOM_NUMBERS = ['101', '102', '103', '104', '105']
DEFAULT_RFID_UIDS = ['A1', 'A2', 'A3', 'A4', 'A5']


def create_initial_data():
    """Create initial data for the application; safe to run on every start"""
    try:
        admin = Admin.query.filter_by(email=DEFAULT_ADMIN['email']).first()
        if not admin:
            admin = Admin(
                username=DEFAULT_ADMIN['username'],
                email=DEFAULT_ADMIN['email'],
                role=DEFAULT_ADMIN['role'],
            )
            admin.set_password(DEFAULT_ADMIN['password'])
            db.session.add(admin)
            logger.info(f"[SEED] Created admin user: {DEFAULT_ADMIN['email']}")

        # Commit the admin first so a room/tag failure does not lose it
        db.session.commit()

        created_rooms = 0
        for room_number in DEFAULT_ROOM_NUMBERS:
            if not Room.query.filter_by(room_number=room_number).first():
                db.session.add(Room(room_number=room_number, status=ROOM_AVAILABLE))
                created_rooms += 1

        created_tags = 0
        for rfid_uid in DEFAULT_RFID_UIDS:
            if not RFIDTag.query.filter_by(rfid_uid=rfid_uid).first():
                db.session.add(RFIDTag(rfid_uid=rfid_uid, status=RFID_AVAILABLE))
                created_tags += 1

        db.session.commit()
        logger.info(f"[SEED] Database initialization complete ({created_rooms} room(s), {created_tags} tag(s) added)")

    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[SEED] Database initialization error: {e}")
