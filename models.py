from datetime import datetime, timezone

import pytz
from extensions import db
from werkzeug.security import generate_password_hash, check_password_hash

LOCAL_TIMEZONE = pytz.timezone('Asia/Manila')

# RFID tag lifecycle
RFID_AVAILABLE = 'available'
RFID_ASSIGNED = 'assigned'
RFID_ACTIVE = 'active'
RFID_LOST = 'lost'
RFID_STATUSES = (RFID_AVAILABLE, RFID_ASSIGNED, RFID_ACTIVE, RFID_LOST)

# Room lifecycle
ROOM_AVAILABLE = 'available'
ROOM_RESERVED = 'reserved'
ROOM_OCCUPIED = 'occupied'
ROOM_MAINTENANCE = 'maintenance'
ROOM_STATUSES = (ROOM_AVAILABLE, ROOM_RESERVED, ROOM_OCCUPIED, ROOM_MAINTENANCE)

ADMIN_ROLES = ('superadmin', 'admin', 'manager')

SERVICE_REQUEST_STATUSES = {
    'pending': 'Pending',
    'in_progress': 'In Progress',
    'completed': 'Completed',
    'canceled': 'Canceled',
}


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None


def to_local_time(dt):
    """Convert a stored UTC timestamp to Philippine time."""
    if not dt:
        return dt
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(LOCAL_TIMEZONE)


class Guest(db.Model):
    __tablename__ = 'guests'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(30), nullable=False)  # not unique, login may match several rows
    password = db.Column(db.String(256), nullable=False)
    membership_level = db.Column(db.String(30), default='Regular')
    membership_start = db.Column(db.DateTime, default=utcnow)
    membership_renewals = db.Column(db.Integer, default=0)
    avatar_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utcnow)

    # Relationships
    rfid_tags = db.relationship('RFIDTag', backref='guest', lazy='dynamic')
    rooms = db.relationship('Room', backref='guest', lazy='dynamic')

    def set_password(self, password):
        self.password = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password, password)

    def to_dict(self):
        """Convert guest to dictionary for API responses (no password hash)"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'membership_level': self.membership_level,
            'membership_start': isoformat(self.membership_start),
            'membership_renewals': self.membership_renewals,
            'avatar_url': self.avatar_url,
        }

    def __repr__(self):
        return f'<Guest {self.email}>'


class Admin(db.Model):
    __tablename__ = 'admins'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), default='admin')  # superadmin, admin, manager
    avatar_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utcnow)

    def set_password(self, password):
        self.password = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'avatar_url': self.avatar_url,
        }

    def __repr__(self):
        return f'<Admin {self.username}>'


class RFIDTag(db.Model):
    """Physical access card; status moves available -> assigned -> active"""
    __tablename__ = 'rfid_tags'

    id = db.Column(db.Integer, primary_key=True)
    rfid_uid = db.Column(db.String(64), unique=True, nullable=False)
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'))
    status = db.Column(db.String(20), nullable=False, default=RFID_AVAILABLE)

    def to_dict(self):
        return {
            'id': self.id,
            'rfid_uid': self.rfid_uid,
            'guest_id': self.guest_id,
            'status': self.status,
        }

    def __repr__(self):
        return f'<RFIDTag {self.rfid_uid} - {self.status}>'


class Room(db.Model):
    """Bookable unit; status moves available -> reserved -> occupied -> available"""
    __tablename__ = 'rooms'

    id = db.Column(db.Integer, primary_key=True)
    room_number = db.Column(db.String(10), unique=True, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=ROOM_AVAILABLE)
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'))
    hours_stay = db.Column(db.Float)
    registration_time = db.Column(db.DateTime)
    check_in = db.Column(db.DateTime)
    check_out = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'room_number': self.room_number,
            'status': self.status,
            'guest_id': self.guest_id,
            'hours_stay': self.hours_stay,
            'registration_time': isoformat(self.registration_time),
            'check_in': isoformat(self.check_in),
            'check_out': isoformat(self.check_out),
        }

    def __repr__(self):
        return f'<Room {self.room_number}>'


class ServiceRequest(db.Model):
    """Guest requests for housekeeping, maintenance and other services"""
    __tablename__ = 'service_requests'

    id = db.Column(db.Integer, primary_key=True)
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'), nullable=False)
    guest_name = db.Column(db.String(120))
    service_type = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=False)
    preferred_time = db.Column(db.String(50))
    status = db.Column(db.String(20), default='pending')  # pending, in_progress, completed, canceled
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'guest_id': self.guest_id,
            'guest_name': self.guest_name,
            'service_type': self.service_type,
            'description': self.description,
            'preferred_time': self.preferred_time,
            'status': self.status,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<ServiceRequest {self.id} - Guest {self.guest_id}>'


class FeedbackComplaint(db.Model):
    __tablename__ = 'feedback_complaints'

    id = db.Column(db.Integer, primary_key=True)
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'), nullable=False)
    guest_name = db.Column(db.String(120))
    feedback_type = db.Column(db.String(30), nullable=False)  # 'feedback', 'complaint'
    description = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), default='pending')
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'guest_id': self.guest_id,
            'guest_name': self.guest_name,
            'feedback_type': self.feedback_type,
            'description': self.description,
            'status': self.status,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<FeedbackComplaint {self.id}>'


class Notification(db.Model):
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    recipient_guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'))
    recipient_admin_id = db.Column(db.Integer, db.ForeignKey('admins.id'))
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    note_message = db.Column(db.Text)
    notification_type = db.Column(db.String(50))  # 'service_request', 'stay_ending_soon', 'auto_checkout', etc.
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        local = to_local_time(self.created_at)
        return {
            'id': self.id,
            'recipient_guest_id': self.recipient_guest_id,
            'recipient_admin_id': self.recipient_admin_id,
            'title': self.title,
            'message': self.message,
            'note_message': self.note_message,
            'notification_type': self.notification_type,
            'is_read': self.is_read,
            'created_at': isoformat(self.created_at),
            'created_at_local': local.strftime('%Y-%m-%d %H:%M:%S') if local else None,
        }

    def __repr__(self):
        return f'<Notification {self.id}>'


class AccessLog(db.Model):
    __tablename__ = 'access_logs'

    id = db.Column(db.Integer, primary_key=True)
    rfid_uid = db.Column(db.String(64), nullable=False)
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'))
    access_status = db.Column(db.String(20), nullable=False)  # granted, denied
    door_unlocked = db.Column(db.Boolean, default=False)
    timestamp = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'rfid_uid': self.rfid_uid,
            'guest_id': self.guest_id,
            'access_status': self.access_status,
            'door_unlocked': self.door_unlocked,
            'timestamp': isoformat(self.timestamp),
        }

    def __repr__(self):
        return f'<AccessLog {self.id} - {self.access_status}>'


class ActivityLog(db.Model):
    """Audit trail for service requests"""
    __tablename__ = 'activity_logs'

    id = db.Column(db.Integer, primary_key=True)
    request_id = db.Column(db.Integer, db.ForeignKey('service_requests.id'), nullable=False)
    admin_id = db.Column(db.Integer, db.ForeignKey('admins.id'))
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'))
    log_type = db.Column(db.String(50), nullable=False)  # 'request_created', 'status_change'
    log_message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'request_id': self.request_id,
            'admin_id': self.admin_id,
            'guest_id': self.guest_id,
            'log_type': self.log_type,
            'log_message': self.log_message,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<ActivityLog {self.id} - {self.log_type}>'


class MacAddress(db.Model):
    __tablename__ = 'mac_addresses'

    id = db.Column(db.Integer, primary_key=True)
    mac = db.Column(db.String(32), nullable=False)
    ip = db.Column(db.String(45))
    status = db.Column(db.String(20), default='pending')  # pending, connected
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id'))
    rfid_uid = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'mac': self.mac,
            'ip': self.ip,
            'status': self.status,
            'guest_id': self.guest_id,
            'rfid_uid': self.rfid_uid,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<MacAddress {self.mac}>'
