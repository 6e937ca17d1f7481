import logging

from flask import Blueprint, jsonify

from errors import NotFound, ValidationError
from extensions import db
from models import FeedbackComplaint, Guest
from request_parsing import id_value, json_body

logger = logging.getLogger(__name__)

feedback_bp = Blueprint('feedback', __name__, url_prefix='/api/feedback')


@feedback_bp.route('/submit', methods=['POST'])
def submit_feedback():
    data = json_body()
    guest_id = data.get('guest_id')
    feedback_type = data.get('feedback_type')
    description = data.get('description')

    if not guest_id or not feedback_type or not description:
        raise ValidationError('All fields are required')

    guest_id = id_value(guest_id, 'guest_id')
    guest = db.session.get(Guest, guest_id)
    if not guest:
        raise NotFound('Guest not found')

    feedback = FeedbackComplaint(
        guest_id=guest.id,
        guest_name=guest.name,
        feedback_type=feedback_type,
        description=description,
        status='pending',
    )
    db.session.add(feedback)
    db.session.commit()

    logger.info(f"[FEEDBACK] {feedback_type} {feedback.id} from guest {guest.id}")
    return jsonify({'success': True, 'message': 'Feedback submitted successfully', 'data': feedback.to_dict()}), 201


@feedback_bp.route('/guest/<int:guest_id>', methods=['GET'])
def get_feedback_by_guest(guest_id):
    items = (FeedbackComplaint.query
             .filter_by(guest_id=guest_id)
             .order_by(FeedbackComplaint.created_at.desc(), FeedbackComplaint.id.desc())
             .all())
    if not items:
        raise NotFound('No feedback found for this guest')

    return jsonify({
        'success': True,
        'message': 'Feedback retrieved successfully',
        'data': [item.to_dict() for item in items],
    }), 200
