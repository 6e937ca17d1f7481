import logging

from flask import Blueprint, jsonify

from auth import admin_required
from errors import NotFound, ValidationError
from extensions import db
from models import Admin, Guest
from notification_service import (create_notification, delete_notification,
                                   get_notifications_by_admin, get_notifications_by_guest,
                                   mark_notification_as_read)
from request_parsing import id_value, json_body

logger = logging.getLogger(__name__)

notification_bp = Blueprint('notifications', __name__, url_prefix='/api/notifications')


def _notification_from_body(data, recipient_field, model):
    recipient_id = data.get(recipient_field)
    title = data.get('title')
    message = data.get('message')
    if not recipient_id or not title or not message:
        raise ValidationError(f'Missing required fields: {recipient_field}, title, message')
    recipient_id = id_value(recipient_id, recipient_field)
    if not db.session.get(model, recipient_id):
        raise NotFound(f'{model.__name__} not found')

    return create_notification(
        title=title,
        message=message,
        notification_type=data.get('notification_type'),
        note_message=data.get('note_message'),
        **{recipient_field: recipient_id},
    )


@notification_bp.route('', methods=['POST'])
def create_guest_notification():
    data = json_body()
    notification = _notification_from_body(data, 'recipient_guest_id', Guest)
    return jsonify({
        'success': True,
        'message': 'Notification created successfully',
        'data': notification.to_dict(),
    }), 201


@notification_bp.route('/admin', methods=['POST'])
def create_admin_notification():
    data = json_body()
    notification = _notification_from_body(data, 'recipient_admin_id', Admin)
    return jsonify({
        'success': True,
        'message': 'Admin notification created successfully',
        'data': notification.to_dict(),
    }), 201


@notification_bp.route('/guest/<int:guest_id>', methods=['GET'])
def get_guest_notifications(guest_id):
    notifications = get_notifications_by_guest(guest_id)
    if not notifications:
        raise NotFound('No notifications found for this guest')
    return jsonify({
        'success': True,
        'message': 'Notifications retrieved successfully',
        'data': [n.to_dict() for n in notifications],
    }), 200


@notification_bp.route('/admin/<int:admin_id>', methods=['GET'])
def get_admin_notifications(admin_id):
    notifications = get_notifications_by_admin(admin_id)
    if not notifications:
        raise NotFound('No notifications found for this admin')
    return jsonify({
        'success': True,
        'message': 'Notifications retrieved successfully',
        'data': [n.to_dict() for n in notifications],
    }), 200


@notification_bp.route('/<int:notification_id>/mark-read', methods=['PUT'])
def mark_read(notification_id):
    notification = mark_notification_as_read(notification_id)
    if notification is None:
        raise NotFound('Notification not found')
    return jsonify({
        'success': True,
        'message': 'Notification marked as read',
        'data': notification.to_dict(),
    }), 200


@notification_bp.route('/<int:notification_id>', methods=['DELETE'])
@admin_required
def remove_notification(notification_id):
    data = delete_notification(notification_id)
    if data is None:
        raise NotFound('Notification not found')
    logger.info(f"[NOTIFY] Deleted notification {notification_id}")
    return jsonify({'success': True, 'message': 'Notification deleted successfully', 'data': data}), 200
