"""
JSON response helpers shared by the blueprints
"""
import logging
from urllib.parse import urlsplit

from flask import current_app, jsonify, request

from services.errors import IntakeError, ValidationError

logger = logging.getLogger(__name__)


def intake_service():
    """The intake session registered by the app factory"""
    return current_app.extensions['intake']


def json_object():
    """The JSON request body as a dict; an absent body is empty"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def error_response(error: Exception):
    """Turn an exception into the {'success': False, 'error': ...} envelope"""
    if isinstance(error, IntakeError):
        return jsonify({
            'success': False,
            'error': error.message,
            'error_type': type(error).__name__,
            'session': intake_service().snapshot()
        }), error.status_code

    logger.exception('Unhandled error on %s', request.path)
    return jsonify({
        'success': False,
        'error': str(error)
    }), 500


def is_secure_request() -> bool:
    """HTTPS, or a host trusted as local"""
    if request.is_secure:
        return True
    hostname = urlsplit('//' + request.host).hostname
    return hostname in current_app.config['TRUSTED_HOSTS']
