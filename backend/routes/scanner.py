"""
Scanner endpoints - camera lifecycle
"""
from flask import Blueprint, jsonify

from utils.responses import error_response, intake_service, is_secure_request

scanner_bp = Blueprint('scanner', __name__)


@scanner_bp.route('/scanner/start', methods=['POST'])
def start_scanner():
    """Start the camera; the first decoded badge becomes the current contact"""
    try:
        intake = intake_service()
        intake.capture.start(secure_context=is_secure_request())
        return jsonify({
            'success': True,
            'session': intake.snapshot()
        }), 200

    except Exception as e:
        return error_response(e)


@scanner_bp.route('/scanner/stop', methods=['POST'])
def stop_scanner():
    try:
        intake = intake_service()
        intake.capture.stop()
        return jsonify({
            'success': True,
            'session': intake.snapshot()
        }), 200

    except Exception as e:
        return error_response(e)


@scanner_bp.route('/scanner/devices', methods=['POST'])
def refresh_devices():
    """Enumerate cameras again (after plugging one in)"""
    try:
        intake = intake_service()
        devices = intake.capture.check_devices()
        return jsonify({
            'success': True,
            'devices': list(devices),
            'session': intake.snapshot()
        }), 200

    except Exception as e:
        return error_response(e)
