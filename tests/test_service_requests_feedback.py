from models import ActivityLog, FeedbackComplaint, Notification, ServiceRequest


def submit(client, guest, **overrides):
    payload = {
        'guest_id': guest.id,
        'guest_name': guest.name,
        'service_type': 'Housekeeping',
        'description': 'Extra towels please',
        'preferred_time': '2025-01-01T15:00:00',
    }
    payload.update(overrides)
    return client.post('/api/service-requests/submit', json=payload)


def test_submit_logs_and_notifies_admins(client, guest, admin):
    response = submit(client, guest)
    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['status'] == 'pending'

    log = ActivityLog.query.filter_by(request_id=data['id']).one()
    assert log.log_type == 'request_created'
    assert log.log_message == f'Guest #{guest.id} created a Housekeeping request.'

    note = Notification.query.filter_by(recipient_admin_id=admin.id).one()
    assert note.title == 'New Service Request'
    assert note.notification_type == 'service_request'


def test_submit_validation(client, guest):
    response = submit(client, guest, description='')
    assert response.status_code == 400

    response = submit(client, guest, guest_id=999)
    assert response.status_code == 404

    response = submit(client, guest, guest_id={'id': guest.id})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'guest_id must be an integer.'
    assert ServiceRequest.query.count() == 0


def test_status_update_notifies_guest(client, guest):
    request_id = submit(client, guest).get_json()['data']['id']

    response = client.put(f'/api/service-requests/{request_id}/status', json={'status': 'in_progress'})
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == 'in_progress'

    note = Notification.query.filter_by(recipient_guest_id=guest.id).one()
    assert note.title == 'Service Request Updated'
    assert note.message == 'Your Housekeeping request is now In Progress.'

    types = [log.log_type for log in ActivityLog.query.filter_by(request_id=request_id).order_by(ActivityLog.id)]
    assert types == ['request_created', 'status_change']


def test_status_update_errors(client, guest):
    request_id = submit(client, guest).get_json()['data']['id']

    response = client.put(f'/api/service-requests/{request_id}/status', json={'status': 'done'})
    assert response.status_code == 400

    response = client.put('/api/service-requests/999/status', json={'status': 'completed'})
    assert response.status_code == 404


def test_list_by_guest(client, guest):
    submit(client, guest, preferred_time='2025-01-01T09:00:00', service_type='Laundry')
    submit(client, guest, preferred_time='2025-01-02T09:00:00', service_type='Room Service')

    response = client.get(f'/api/service-requests/guest/{guest.id}')
    assert response.status_code == 200
    assert [r['service_type'] for r in response.get_json()['data']] == ['Room Service', 'Laundry']

    response = client.get(f'/api/service-requests/guest/{guest.id}?limit=1&offset=1')
    assert [r['service_type'] for r in response.get_json()['data']] == ['Laundry']

    assert client.get(f'/api/service-requests/guest/{guest.id}?limit=x').status_code == 400
    assert client.get('/api/service-requests/guest/999').status_code == 404


def test_feedback(client, guest):
    response = client.post('/api/feedback/submit', json={
        'guest_id': guest.id, 'feedback_type': 'complaint', 'description': 'Noisy aircon'})
    assert response.status_code == 201
    assert response.get_json()['data']['guest_name'] == guest.name

    response = client.post('/api/feedback/submit', json={
        'guest_id': guest.id, 'feedback_type': 'feedback', 'description': 'Lovely staff'})
    assert response.status_code == 201

    items = client.get(f'/api/feedback/guest/{guest.id}').get_json()['data']
    assert [i['description'] for i in items] == ['Lovely staff', 'Noisy aircon']
    assert FeedbackComplaint.query.count() == 2


def test_feedback_errors(client):
    response = client.post('/api/feedback/submit', json={'guest_id': 1})
    assert response.status_code == 400

    response = client.post('/api/feedback/submit', json={
        'guest_id': 999, 'feedback_type': 'feedback', 'description': 'Hi'})
    assert response.status_code == 404

    assert client.get('/api/feedback/guest/999').status_code == 404
