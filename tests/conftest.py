"""
Pytest configuration and fixtures for the guest management API.
"""
import os
import sys

import pytest

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app  # noqa: E402
from auth import create_admin_token, create_guest_token  # noqa: E402
from extensions import db  # noqa: E402
from models import Admin, Guest, RFIDTag, Room, RFID_AVAILABLE, ROOM_AVAILABLE  # noqa: E402

TEST_PASSWORD = "testpass123"


@pytest.fixture
def app():
    """Fresh application on an in-memory database for every test."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'JWT_SECRET_KEY': 'test-secret-key-not-for-production-use',
        'SCHEDULER_ENABLED': False,
        'SEED_INITIAL_DATA': False,
        'AUTO_CHECKOUT_GRACE_MINUTES': 0,
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_guest(app):
    counter = {'n': 0}

    def _make_guest(name=None, email=None, phone='09171234567', password=TEST_PASSWORD):
        counter['n'] += 1
        guest = Guest(
            name=name or f"Guest {counter['n']}",
            email=email or f"guest{counter['n']}@example.com",
            phone=phone,
        )
        guest.set_password(password)
        db.session.add(guest)
        db.session.commit()
        return guest

    return _make_guest


@pytest.fixture
def guest(make_guest):
    return make_guest()


@pytest.fixture
def admin(app):
    admin = Admin(username='frontdesk', email='frontdesk@hotel.com', role='admin')
    admin.set_password(TEST_PASSWORD)
    db.session.add(admin)
    db.session.commit()
    return admin


@pytest.fixture
def admin_headers(admin):
    return {'Authorization': f'Bearer {create_admin_token(admin)}'}


@pytest.fixture
def guest_headers(guest):
    return {'Authorization': f'Bearer {create_guest_token(guest)}'}


@pytest.fixture
def make_room(app):
    def _make_room(room_number, status=ROOM_AVAILABLE, **fields):
        room = Room(room_number=room_number, status=status, **fields)
        db.session.add(room)
        db.session.commit()
        return room

    return _make_room


@pytest.fixture
def make_tag(app):
    def _make_tag(rfid_uid, status=RFID_AVAILABLE, guest_id=None):
        tag = RFIDTag(rfid_uid=rfid_uid, status=status, guest_id=guest_id)
        db.session.add(tag)
        db.session.commit()
        return tag

    return _make_tag
