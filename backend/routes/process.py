"""
Process badge endpoints - turn decoded QR text or a badge image into a contact
"""
import logging

from flask import Blueprint, jsonify, request

from services.errors import DecodeEmptyError
from utils.responses import error_response, intake_service, json_object

logger = logging.getLogger(__name__)

process_bp = Blueprint('process', __name__)


@process_bp.route('/extract', methods=['POST'])
def extract_text():
    """
    Extract contact fields from decoded QR text (keyboard-wedge scanners, paste)

    Request:
        {"text": "FN:Jane Doe\\nEMAIL:jane@acme.com"} or a text/plain body

    Response:
        {
            "success": true,
            "extracted_data": {...},
            "parsing_metadata": {...},
            "session": {...}
        }
    """
    try:
        if request.is_json:
            text = json_object().get('text')
        else:
            text = request.get_data(as_text=True)

        if text is None:
            return jsonify({
                'success': False,
                'error': 'No text provided'
            }), 400

        result = intake_service().capture.accept_decoded(text)
        response = {'success': True}
        response.update(result.to_dict())
        response['session'] = intake_service().snapshot()
        return jsonify(response), 200

    except Exception as e:
        return error_response(e)


@process_bp.route('/process-badge', methods=['POST'])
def process_badge():
    """
    Decode the QR code on an uploaded badge image and extract its contact

    Request:
        {"image": "base64_encoded_image"} or multipart form data with an 'image' file
    """
    try:
        image_data = None

        if request.is_json:
            image_data = json_object().get('image')
        elif 'image' in request.files:
            image_data = request.files['image'].read()
        elif 'image' in request.form:
            image_data = request.form['image']

        if not image_data:
            return jsonify({
                'success': False,
                'error': 'No image provided'
            }), 400

        from services.decoder_service import decode_image
        try:
            payloads = decode_image(image_data)
        except (ValueError, OSError) as e:
            logger.warning('Unreadable badge image: %s', e)
            return jsonify({
                'success': False,
                'error': 'Image could not be read'
            }), 400

        if not payloads:
            raise DecodeEmptyError('No QR code found in image')

        result = intake_service().capture.accept_decoded(payloads[0])
        response = {'success': True, 'raw_text': payloads[0]}
        response.update(result.to_dict())
        response['session'] = intake_service().snapshot()
        return jsonify(response), 200

    except Exception as e:
        return error_response(e)
