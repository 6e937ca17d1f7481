"""
MAC address registry for the in-room network gateway.

Devices are logged as 'pending'; the gateway whitelists the ones marked
'connected'.
"""
import logging

from flask import Blueprint, jsonify

from errors import NotFound, ValidationError
from extensions import db
from models import MacAddress
from request_parsing import json_body, optional_id

logger = logging.getLogger(__name__)

mac_address_bp = Blueprint('mac_address', __name__, url_prefix='/api/mac-address')

MAC_PENDING = 'pending'
MAC_CONNECTED = 'connected'


@mac_address_bp.route('/log', methods=['POST'])
def log_mac_address():
    data = json_body()
    mac = data.get('mac')
    if not mac:
        raise ValidationError('MAC is required')

    record = MacAddress(
        mac=mac,
        ip=data.get('ip'),
        status=data.get('status') or MAC_PENDING,
        guest_id=optional_id(data, 'guest_id'),
        rfid_uid=data.get('rfid_uid'),
    )
    db.session.add(record)
    db.session.commit()

    logger.info(f"[MAC] Logged {mac} ({record.status})")
    return jsonify({'success': True, 'message': 'MAC address logged successfully', 'data': record.to_dict()}), 201


@mac_address_bp.route('/whitelisted', methods=['GET'])
def get_whitelisted_macs():
    rows = MacAddress.query.filter_by(status=MAC_CONNECTED).order_by(MacAddress.id).all()
    return jsonify({
        'success': True,
        'message': 'Whitelisted MAC addresses fetched successfully',
        'data': [{'mac': row.mac} for row in rows],
    }), 200


@mac_address_bp.route('/update-status', methods=['POST'])
def update_mac_status():
    data = json_body()
    mac = data.get('mac')
    status = data.get('status')
    if not mac or not status:
        raise ValidationError('mac and status are required')

    updated = (MacAddress.query
               .filter_by(mac=mac)
               .update({'status': status}, synchronize_session=False))
    db.session.commit()
    if not updated:
        raise NotFound('MAC not found or no rows updated')

    record = MacAddress.query.filter_by(mac=mac).order_by(MacAddress.id.desc()).first()
    logger.info(f"[MAC] {mac} status updated to {status}")
    return jsonify({
        'success': True,
        'message': f'MAC {mac} status updated to {status}',
        'data': record.to_dict(),
    }), 200
