import logging

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from errors import DatabaseError, NotFound, ValidationError
from extensions import db
from models import ActivityLog, Guest, ServiceRequest, SERVICE_REQUEST_STATUSES
from notification_service import create_notification, notify_all_admins
from request_parsing import id_value, json_body, optional_id, paging_args

logger = logging.getLogger(__name__)

service_request_bp = Blueprint('service_requests', __name__, url_prefix='/api/service-requests')

REQUIRED_FIELDS = ('guest_id', 'guest_name', 'service_type', 'description', 'preferred_time')


@service_request_bp.route('/submit', methods=['POST'])
def submit_service_request():
    """Create a service request, log it and tell every admin"""
    data = json_body()
    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        raise ValidationError(f"All fields are required: {', '.join(REQUIRED_FIELDS)}")

    guest_id = id_value(data['guest_id'], 'guest_id')
    if not db.session.get(Guest, guest_id):
        raise NotFound('Guest not found')

    try:
        service_request = ServiceRequest(
            guest_id=guest_id,
            guest_name=data['guest_name'],
            service_type=data['service_type'],
            description=data['description'],
            preferred_time=str(data['preferred_time']),
            status='pending',
        )
        db.session.add(service_request)
        db.session.flush()

        db.session.add(ActivityLog(
            request_id=service_request.id,
            guest_id=guest_id,
            log_type='request_created',
            log_message=f"Guest #{guest_id} created a {service_request.service_type} request.",
        ))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[SERVICE] Error saving service request: {e}")
        raise DatabaseError('Database error: Unable to submit service request')

    notify_all_admins(
        title='New Service Request',
        message=f"Guest #{guest_id} submitted a {service_request.service_type} request.",
        notification_type='service_request',
    )

    logger.info(f"[SERVICE] Request {service_request.id} submitted by guest {guest_id}")
    return jsonify({
        'success': True,
        'message': 'Service request submitted successfully',
        'data': service_request.to_dict(),
    }), 201


@service_request_bp.route('/<int:request_id>/status', methods=['PUT'])
def update_service_request_status(request_id):
    data = json_body()
    status = data.get('status')
    if status not in SERVICE_REQUEST_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(SERVICE_REQUEST_STATUSES)}.")

    service_request = db.session.get(ServiceRequest, request_id)
    if not service_request:
        raise NotFound(f'Service request #{request_id} not found.')

    admin_id = optional_id(data, 'admin_id')
    label = SERVICE_REQUEST_STATUSES[status]
    service_request.status = status
    db.session.add(ActivityLog(
        request_id=service_request.id,
        guest_id=service_request.guest_id,
        admin_id=admin_id,
        log_type='status_change',
        log_message=f'Status changed to {label}.',
    ))
    db.session.commit()

    create_notification(
        title='Service Request Updated',
        message=f"Your {service_request.service_type or 'service request'} request is now {label}.",
        recipient_guest_id=service_request.guest_id,
        notification_type='service_request',
    )

    logger.info(f"[SERVICE] Request {request_id} status -> {status}")
    return jsonify({
        'success': True,
        'message': f'Service request #{request_id} status updated to {status}.',
        'data': service_request.to_dict(),
    }), 200


@service_request_bp.route('/guest/<int:guest_id>', methods=['GET'])
def get_service_requests_by_guest(guest_id):
    limit, offset = paging_args()
    requests = (ServiceRequest.query
                .filter_by(guest_id=guest_id)
                .order_by(ServiceRequest.preferred_time.desc(), ServiceRequest.id.desc())
                .offset(offset)
                .limit(limit)
                .all())
    if not requests:
        raise NotFound('No service requests found for this guest')

    return jsonify({
        'success': True,
        'message': 'Service requests retrieved successfully',
        'data': [item.to_dict() for item in requests],
    }), 200
