from datetime import datetime, timedelta

from checkout_scheduler import init_scheduler, run_checkout_sweep
from extensions import db
from models import (Notification, RFIDTag, Room, RFID_ACTIVE, RFID_AVAILABLE, RFID_LOST,
                    ROOM_AVAILABLE, ROOM_OCCUPIED, ROOM_RESERVED)

NOW = datetime(2025, 1, 1, 12, 0)


def occupied_room(make_room, guest, check_out, room_number='101'):
    return make_room(room_number, status=ROOM_OCCUPIED, guest_id=guest.id, hours_stay=1,
                     registration_time=check_out - timedelta(hours=2),
                     check_in=check_out - timedelta(hours=1), check_out=check_out)


def test_warns_ten_minutes_before_check_out(guest, admin, make_room):
    occupied_room(make_room, guest, NOW + timedelta(minutes=10, seconds=30))

    summary = run_checkout_sweep(now=NOW)
    assert summary == {'warned': ['101'], 'checked_out': []}

    guest_notes = Notification.query.filter_by(recipient_guest_id=guest.id).all()
    assert [n.notification_type for n in guest_notes] == ['stay_ending_soon']
    admin_notes = Notification.query.filter_by(recipient_admin_id=admin.id).all()
    assert [n.title for n in admin_notes] == ['Guest Stay Ending Soon']

    # Still occupied
    assert Room.query.filter_by(room_number='101').first().status == ROOM_OCCUPIED


def test_no_warning_outside_the_window(guest, make_room):
    occupied_room(make_room, guest, NOW + timedelta(minutes=11, seconds=30))
    occupied_room(make_room, guest, NOW + timedelta(minutes=9, seconds=30), room_number='102')

    assert run_checkout_sweep(now=NOW) == {'warned': [], 'checked_out': []}
    assert Notification.query.count() == 0


def test_auto_checkout_resets_room_and_tags(guest, admin, make_room, make_tag):
    occupied_room(make_room, guest, NOW - timedelta(minutes=1))
    make_tag('A1', status=RFID_ACTIVE, guest_id=guest.id)
    make_tag('A2', status=RFID_LOST, guest_id=guest.id)

    summary = run_checkout_sweep(now=NOW)
    assert summary == {'warned': [], 'checked_out': ['101']}

    room = Room.query.filter_by(room_number='101').first()
    assert room.status == ROOM_AVAILABLE
    assert room.guest_id is None
    assert room.hours_stay is None
    assert room.registration_time is None
    assert room.check_in is None
    assert room.check_out is None

    active = RFIDTag.query.filter_by(rfid_uid='A1').first()
    assert active.status == RFID_AVAILABLE
    assert active.guest_id is None
    # Lost cards stay lost
    assert RFIDTag.query.filter_by(rfid_uid='A2').first().status == RFID_LOST

    guest_note = Notification.query.filter_by(recipient_guest_id=guest.id).one()
    assert guest_note.title == 'Checked Out'
    assert guest_note.notification_type == 'auto_checkout'
    admin_note = Notification.query.filter_by(recipient_admin_id=admin.id).one()
    assert admin_note.title == 'Guest Auto-Checked Out'


def test_checkout_at_exact_check_out_time(guest, make_room):
    occupied_room(make_room, guest, NOW)
    assert run_checkout_sweep(now=NOW)['checked_out'] == ['101']


def test_no_checkout_before_check_out(guest, make_room):
    occupied_room(make_room, guest, NOW + timedelta(seconds=1))
    assert run_checkout_sweep(now=NOW)['checked_out'] == []
    assert Room.query.filter_by(room_number='101').first().status == ROOM_OCCUPIED


def test_grace_period_delays_checkout(guest, make_room):
    occupied_room(make_room, guest, NOW - timedelta(minutes=2))

    assert run_checkout_sweep(now=NOW, grace_minutes=5)['checked_out'] == []
    assert run_checkout_sweep(now=NOW + timedelta(minutes=3), grace_minutes=5)['checked_out'] == ['101']


def test_grace_period_from_config(app, guest, make_room):
    app.config['AUTO_CHECKOUT_GRACE_MINUTES'] = 5
    occupied_room(make_room, guest, NOW - timedelta(minutes=2))
    assert run_checkout_sweep(now=NOW)['checked_out'] == []


def test_reserved_rooms_are_ignored(guest, make_room):
    make_room('101', status=ROOM_RESERVED, guest_id=guest.id, hours_stay=1,
              check_out=NOW - timedelta(hours=1))
    assert run_checkout_sweep(now=NOW) == {'warned': [], 'checked_out': []}
    assert db.session.get(Room, 1).status == ROOM_RESERVED


def test_scheduler_disabled_in_config(app):
    assert init_scheduler(app) is None
    assert 'checkout_scheduler' not in app.extensions


def test_scheduler_registers_minute_job(app):
    app.config['SCHEDULER_ENABLED'] = True
    scheduler = init_scheduler(app)
    try:
        job = scheduler.get_job('auto_checkout')
        assert job is not None
        assert app.extensions['checkout_scheduler'] is scheduler
    finally:
        scheduler.shutdown(wait=False)
