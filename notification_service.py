"""
Notification helpers shared by the routes and the auto-checkout job.
"""
import logging

from extensions import db
from models import Admin, Notification

logger = logging.getLogger(__name__)


def create_notification(title, message, recipient_guest_id=None, recipient_admin_id=None,
                        notification_type=None, note_message=None, commit=True):
    """Insert one notification row addressed to a guest or an admin"""
    notification = Notification(
        recipient_guest_id=recipient_guest_id,
        recipient_admin_id=recipient_admin_id,
        title=title,
        message=message,
        note_message=note_message,
        notification_type=notification_type,
        is_read=False,
    )
    db.session.add(notification)
    if commit:
        db.session.commit()
    return notification


def notify_all_admins(title, message, notification_type=None):
    """Fan a notification out to every admin; returns the rows created"""
    admin_ids = [row.id for row in db.session.query(Admin.id).all()]
    created = [
        create_notification(title, message, recipient_admin_id=admin_id,
                            notification_type=notification_type, commit=False)
        for admin_id in admin_ids
    ]
    db.session.commit()
    logger.debug(f"[NOTIFY] '{title}' sent to {len(created)} admin(s)")
    return created


def get_notifications_by_guest(guest_id):
    return (Notification.query
            .filter_by(recipient_guest_id=guest_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all())


def get_notifications_by_admin(admin_id):
    return (Notification.query
            .filter_by(recipient_admin_id=admin_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all())


def mark_notification_as_read(notification_id):
    updated = (Notification.query
               .filter_by(id=notification_id)
               .update({'is_read': True}, synchronize_session=False))
    db.session.commit()
    if not updated:
        return None
    return db.session.get(Notification, notification_id)


def delete_notification(notification_id):
    notification = db.session.get(Notification, notification_id)
    if not notification:
        return None
    data = notification.to_dict()
    db.session.delete(notification)
    db.session.commit()
    return data
