from datetime import timedelta

from extensions import db
from models import (RFIDTag, Room, RFID_ACTIVE, RFID_AVAILABLE, ROOM_AVAILABLE, ROOM_OCCUPIED,
                    ROOM_RESERVED, utcnow)


def test_create_room_requires_admin(client):
    response = client.post('/api/rooms', json={'room_number': '201'})
    assert response.status_code == 401


def test_create_available_room(client, admin_headers):
    response = client.post('/api/rooms', json={'room_number': '201'}, headers=admin_headers)
    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['status'] == ROOM_AVAILABLE
    assert data['guest_id'] is None


def test_create_reserved_room(client, admin_headers, guest):
    response = client.post('/api/rooms', headers=admin_headers,
                           json={'room_number': '201', 'guest_id': guest.id, 'hours_stay': 1.5})
    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['status'] == ROOM_RESERVED
    assert data['hours_stay'] == 1.5
    assert data['registration_time'] is not None


def test_create_duplicate_room(client, admin_headers, make_room):
    make_room('201')
    response = client.post('/api/rooms', json={'room_number': '201'}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Room number 201 already exists.'


def test_create_room_rejects_bad_hours(client, admin_headers, guest):
    for hours in (0, -2, 'abc', True):
        response = client.post('/api/rooms', headers=admin_headers,
                               json={'room_number': '201', 'guest_id': guest.id, 'hours_stay': hours})
        assert response.status_code == 400, hours
    assert Room.query.count() == 0


def test_assign_reserves_available_room(client, guest, make_room):
    make_room('101')

    response = client.put('/api/rooms/assign',
                          json={'room_number': '101', 'guest_id': guest.id, 'hours_stay': 2})
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['status'] == ROOM_RESERVED
    assert data['guest_id'] == guest.id
    assert data['hours_stay'] == 2

    # A reserved room cannot be reserved again
    response = client.put('/api/rooms/assign',
                          json={'room_number': '101', 'guest_id': guest.id, 'hours_stay': 2})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'No available room found with room_number = 101'


def test_assign_validation(client, guest, make_room):
    make_room('101')

    response = client.put('/api/rooms/assign', json={'room_number': '101', 'guest_id': guest.id})
    assert response.status_code == 400

    response = client.put('/api/rooms/assign',
                          json={'room_number': '101', 'guest_id': guest.id, 'hours_stay': -1})
    assert response.status_code == 400

    response = client.put('/api/rooms/assign',
                          json={'room_number': '101', 'guest_id': 999, 'hours_stay': 1})
    assert response.status_code == 404

    response = client.put('/api/rooms/assign',
                          json={'room_number': '101', 'guest_id': [guest.id], 'hours_stay': 1})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'guest_id must be an integer.'

    assert Room.query.filter_by(room_number='101').first().status == ROOM_AVAILABLE


def test_assign_room_under_maintenance(client, guest, make_room):
    make_room('101', status='maintenance')
    response = client.put('/api/rooms/assign',
                          json={'room_number': '101', 'guest_id': guest.id, 'hours_stay': 1})
    assert response.status_code == 400


def test_get_rooms(client, make_room):
    make_room('103')
    room = make_room('101')

    rooms = client.get('/api/rooms').get_json()['data']
    assert [r['room_number'] for r in rooms] == ['101', '103']

    response = client.get(f'/api/rooms/{room.id}')
    assert response.status_code == 200
    assert response.get_json()['data']['room_number'] == '101'

    assert client.get('/api/rooms/999').status_code == 404


def test_update_room(client, admin_headers, make_room):
    room = make_room('101')
    room_id = room.id

    response = client.put(f'/api/rooms/{room_id}', json={}, headers=admin_headers)
    assert response.status_code == 400

    response = client.put(f'/api/rooms/{room_id}', json={'status': 'vacant'}, headers=admin_headers)
    assert response.status_code == 400

    response = client.put(f'/api/rooms/{room_id}', json={'hours_stay': 0}, headers=admin_headers)
    assert response.status_code == 400

    response = client.put(f'/api/rooms/{room_id}', headers=admin_headers,
                          json={'status': 'maintenance', 'room_number': '101A'})
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['status'] == 'maintenance'
    assert data['room_number'] == '101A'

    assert client.put('/api/rooms/999', json={'status': 'available'},
                      headers=admin_headers).status_code == 404


def test_update_room_keeps_status_and_guest_consistent(client, admin_headers, guest, make_room):
    room_id = make_room('101').id

    response = client.put(f'/api/rooms/{room_id}', json={'status': ROOM_OCCUPIED}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == "Room status 'occupied' requires a guest_id."

    response = client.put(f'/api/rooms/{room_id}', json={'guest_id': guest.id}, headers=admin_headers)
    assert response.status_code == 400

    response = client.put(f'/api/rooms/{room_id}', json={'guest_id': {'id': guest.id}},
                          headers=admin_headers)
    assert response.status_code == 400
    assert db.session.get(Room, room_id).status == ROOM_AVAILABLE

    response = client.put(f'/api/rooms/{room_id}', headers=admin_headers,
                          json={'status': ROOM_RESERVED, 'guest_id': guest.id, 'hours_stay': 2})
    assert response.status_code == 200
    assert response.get_json()['data']['guest_id'] == guest.id

    response = client.put(f'/api/rooms/{room_id}', json={'guest_id': None}, headers=admin_headers)
    assert response.status_code == 400

    response = client.put(f'/api/rooms/{room_id}', json={'status': ROOM_AVAILABLE}, headers=admin_headers)
    assert response.status_code == 400

    response = client.put(f'/api/rooms/{room_id}', headers=admin_headers,
                          json={'status': ROOM_AVAILABLE, 'guest_id': None})
    assert response.status_code == 200
    assert response.get_json()['data']['guest_id'] is None


def test_delete_room(client, admin_headers, make_room):
    room = make_room('101')
    room_id = room.id

    assert client.delete(f'/api/rooms/{room_id}').status_code == 401

    response = client.delete(f'/api/rooms/{room_id}', headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['room_number'] == '101'
    assert db.session.get(Room, room_id) is None

    assert client.delete(f'/api/rooms/{room_id}', headers=admin_headers).status_code == 404


def test_manual_check_in(client, guest, make_room):
    room = make_room('101', status=ROOM_RESERVED, guest_id=guest.id, hours_stay=2)

    response = client.post(f'/api/rooms/{room.id}/checkin', json={'check_in': '2025-01-01T10:00:00'})
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['status'] == ROOM_OCCUPIED
    assert data['check_in'] == '2025-01-01T10:00:00'
    assert data['check_out'] == '2025-01-01T12:00:00'


def test_manual_check_in_converts_offset(client, guest, make_room):
    room = make_room('101', status=ROOM_RESERVED, guest_id=guest.id, hours_stay=1)

    response = client.post(f'/api/rooms/{room.id}/checkin', json={'check_in': '2025-01-01T18:00:00+08:00'})
    assert response.status_code == 200
    assert response.get_json()['data']['check_in'] == '2025-01-01T10:00:00'


def test_manual_check_in_requires_reservation(client, make_room):
    room = make_room('101')
    response = client.post(f'/api/rooms/{room.id}/checkin', json={})
    assert response.status_code == 400

    assert client.post('/api/rooms/999/checkin', json={}).status_code == 404


def test_manual_check_in_bad_timestamp(client, guest, make_room):
    room = make_room('101', status=ROOM_RESERVED, guest_id=guest.id, hours_stay=1)
    response = client.post(f'/api/rooms/{room.id}/checkin', json={'check_in': 'yesterday'})
    assert response.status_code == 400


def test_manual_check_out_resets_room_and_tags(client, guest, make_room, make_tag):
    now = utcnow()
    room = make_room('101', status=ROOM_OCCUPIED, guest_id=guest.id, hours_stay=1,
                     check_in=now, check_out=now + timedelta(hours=1))
    make_tag('A1', status=RFID_ACTIVE, guest_id=guest.id)

    response = client.post(f'/api/rooms/{room.id}/checkout')
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['status'] == ROOM_AVAILABLE
    assert data['guest_id'] is None
    assert data['check_in'] is None
    assert data['check_out'] is None
    assert data['hours_stay'] is None

    tag = RFIDTag.query.filter_by(rfid_uid='A1').first()
    assert tag.status == RFID_AVAILABLE
    assert tag.guest_id is None


def test_manual_check_out_of_reservation(client, guest, make_room):
    room = make_room('101', status=ROOM_RESERVED, guest_id=guest.id, hours_stay=1)
    response = client.post(f'/api/rooms/{room.id}/checkout')
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == ROOM_AVAILABLE


def test_manual_check_out_of_available_room(client, make_room):
    room = make_room('101')
    assert client.post(f'/api/rooms/{room.id}/checkout').status_code == 400
