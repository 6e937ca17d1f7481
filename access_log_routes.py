import logging

from flask import Blueprint, jsonify

from errors import ValidationError
from extensions import db
from models import AccessLog
from request_parsing import id_value, json_body, paging_args

logger = logging.getLogger(__name__)

access_log_bp = Blueprint('access_logs', __name__, url_prefix='/api/access-logs')


def _save_access_log(rfid_uid, access_status, guest_id=None, door_unlocked=False):
    log = AccessLog(
        rfid_uid=str(rfid_uid),
        guest_id=guest_id,
        access_status=access_status,
        door_unlocked=door_unlocked,
    )
    db.session.add(log)
    db.session.commit()
    return log


@access_log_bp.route('/granted', methods=['POST'])
def log_access_granted():
    data = json_body()
    rfid_uid = data.get('rfid_uid')
    guest_id = data.get('guest_id')
    if not rfid_uid or not guest_id:
        raise ValidationError('rfid_uid and guest_id are required')
    guest_id = id_value(guest_id, 'guest_id')

    log = _save_access_log(rfid_uid, 'granted', guest_id=guest_id, door_unlocked=True)
    logger.info(f"[ACCESS] Granted {rfid_uid} for guest {guest_id}")
    return jsonify({'success': True, 'message': 'Access granted saved successfully', 'data': log.to_dict()}), 201


@access_log_bp.route('/denied', methods=['POST'])
def log_access_denied():
    data = json_body()
    rfid_uid = data.get('rfid_uid')
    if not rfid_uid:
        raise ValidationError('rfid_uid is required')

    log = _save_access_log(rfid_uid, 'denied')
    logger.info(f"[ACCESS] Denied {rfid_uid}")
    return jsonify({'success': True, 'message': 'Access denied saved successfully', 'data': log.to_dict()}), 201


@access_log_bp.route('/<int:guest_id>', methods=['GET'])
def get_access_logs_by_guest(guest_id):
    limit, offset = paging_args()
    logs = (AccessLog.query
            .filter_by(guest_id=guest_id)
            .order_by(AccessLog.timestamp.desc(), AccessLog.id.desc())
            .offset(offset)
            .limit(limit)
            .all())

    # An empty history is not an error for the door dashboard
    message = 'Access logs fetched successfully' if logs else 'No access logs found for this guest'
    return jsonify({'success': True, 'message': message, 'data': [log.to_dict() for log in logs]}), 200
