"""
Session endpoints - manual entry, annotation, reset and submission
"""
from flask import Blueprint, jsonify

from utils.responses import error_response, intake_service, json_object

session_bp = Blueprint('session', __name__)


@session_bp.route('/session', methods=['GET'])
def get_session():
    """Current contact, annotation, status and last submission"""
    return jsonify({
        'success': True,
        'session': intake_service().snapshot()
    }), 200


@session_bp.route('/session/reset', methods=['POST'])
def reset_session():
    intake = intake_service()
    intake.reset()
    return jsonify({
        'success': True,
        'session': intake.snapshot()
    }), 200


@session_bp.route('/session/manual', methods=['POST'])
def manual_entry():
    """
    Use typed-in contact fields

    Request body:
        {"name": "...", "email": "...", "phone": "...", "company": "..."}
    """
    try:
        data = json_object()
        intake = intake_service()
        record = intake.manual_entry(data)
        return jsonify({
            'success': True,
            'contact': record.to_dict(),
            'session': intake.snapshot()
        }), 200

    except Exception as e:
        return error_response(e)


@session_bp.route('/session/annotation', methods=['PUT'])
def update_annotation():
    """
    Update interest level and/or notes

    Request body:
        {"interestLevel": "High", "notes": "..."}
    """
    try:
        data = json_object()
        intake = intake_service()
        if 'interestLevel' in data:
            intake.set_interest_level(data['interestLevel'])
        if 'notes' in data:
            intake.set_notes(data['notes'])
        return jsonify({
            'success': True,
            'session': intake.snapshot()
        }), 200

    except Exception as e:
        return error_response(e)


@session_bp.route('/session/notes/suggestion', methods=['POST'])
def add_note_suggestion():
    """Append one quick note: {"suggestion": "Liste des prix"}"""
    try:
        data = json_object()
        intake = intake_service()
        notes = intake.add_note_suggestion(data.get('suggestion', ''))
        return jsonify({
            'success': True,
            'notes': notes,
            'session': intake.snapshot()
        }), 200

    except Exception as e:
        return error_response(e)


@session_bp.route('/notes/suggestions', methods=['GET'])
def list_note_suggestions():
    return jsonify({
        'success': True,
        'suggestions': intake_service().note_suggestions()
    }), 200


@session_bp.route('/session/submit', methods=['POST'])
def submit_session():
    """Send the current contact and annotation to the spreadsheet"""
    try:
        intake = intake_service()
        submission = intake.submit()
        return jsonify({
            'success': True,
            'submission': submission.to_dict(),
            'session': intake.snapshot()
        }), 200

    except Exception as e:
        return error_response(e)
