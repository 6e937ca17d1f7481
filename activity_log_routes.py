from flask import Blueprint, jsonify

from errors import NotFound, ValidationError
from extensions import db
from models import ActivityLog, ServiceRequest
from request_parsing import id_value, json_body, optional_id, paging_args

activity_log_bp = Blueprint('activity_logs', __name__, url_prefix='/api/activity-logs')


@activity_log_bp.route('', methods=['POST'])
def create_activity_log():
    data = json_body()
    request_id = data.get('request_id')
    log_type = data.get('log_type')
    log_message = data.get('log_message')

    if not request_id or not log_type or not log_message:
        raise ValidationError('request_id, log_type, and log_message are required')
    request_id = id_value(request_id, 'request_id')
    if not db.session.get(ServiceRequest, request_id):
        raise NotFound('Service request not found')

    log = ActivityLog(
        request_id=request_id,
        admin_id=optional_id(data, 'admin_id'),
        guest_id=optional_id(data, 'guest_id'),
        log_type=log_type,
        log_message=log_message,
    )
    db.session.add(log)
    db.session.commit()
    return jsonify({'success': True, 'message': 'Activity log saved successfully', 'data': log.to_dict()}), 201


@activity_log_bp.route('/<int:request_id>', methods=['GET'])
def get_activity_logs(request_id):
    limit, offset = paging_args()
    logs = (ActivityLog.query
            .filter_by(request_id=request_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .offset(offset)
            .limit(limit)
            .all())

    message = 'Activity logs fetched successfully' if logs else 'No activity logs found for this request'
    return jsonify({'success': True, 'message': message, 'data': [log.to_dict() for log in logs]}), 200
