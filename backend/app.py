"""
Main Flask application for the Badge Scanner API
"""
import atexit
import logging
import os

from flask import Flask, current_app
from flask_cors import CORS

from config import config
from routes.process import process_bp
from routes.scanner import scanner_bp
from routes.session import session_bp
from services.intake_service import IntakeService
from services.submission_service import SubmissionCoordinator

logger = logging.getLogger(__name__)


def create_app(config_name=None, decoder=None, http_session=None):
    """
    Build the application

    Args:
        config_name: Key of the config dict (defaults to APP_ENV or 'default')
        decoder: QR decoder capability; a camera-backed QRDecoder by default
        http_session: requests.Session-like object for submissions
    """
    app = Flask(__name__)
    app.config.from_object(config[config_name or os.getenv('APP_ENV', 'default')])
    CORS(app)  # Enable CORS for frontend

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    if decoder is None:
        from services.decoder_service import QRDecoder
        decoder = QRDecoder(max_devices=app.config['MAX_CAMERA_PROBE'])

    coordinator = SubmissionCoordinator(
        app.config['SHEETS_ENDPOINT_URL'],
        content_type=app.config['SUBMISSION_CONTENT_TYPE'],
        timeout=app.config['SUBMISSION_TIMEOUT'],
        session=http_session,
    )
    intake = IntakeService(
        decoder,
        coordinator,
        note_suggestions=app.config['NOTE_SUGGESTIONS'],
        preferred_facing=app.config['PREFERRED_FACING'],
        qrbox=app.config['SCANNER_QRBOX'],
        fps=app.config['SCANNER_FPS'],
    )
    app.extensions['intake'] = intake

    if not app.config['SHEETS_ENDPOINT_URL']:
        logger.warning('SHEETS_ENDPOINT_URL is not set; submissions will fail')

    # Device check once at startup
    if app.config['SCANNER_ENABLED']:
        intake.capture.check_devices()
        atexit.register(intake.close)

    # Register blueprints
    app.register_blueprint(process_bp, url_prefix='/api')
    app.register_blueprint(scanner_bp, url_prefix='/api')
    app.register_blueprint(session_bp, url_prefix='/api')

    @app.route('/api/health')
    def health_check():
        """Health check endpoint with scanner and endpoint status"""
        intake_service = current_app.extensions['intake']
        return {
            'status': 'healthy',
            'service': 'badge-scanner-api',
            'version': '1.0.0',
            'scanner': {
                'enabled': current_app.config['SCANNER_ENABLED'],
                'camera_available': intake_service.state.camera_available,
            },
            'submission': {
                'endpoint_configured': bool(current_app.config['SHEETS_ENDPOINT_URL']),
            },
        }

    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.getenv('PORT', 5001))
    debug_mode = os.getenv('FLASK_DEBUG', 'false').lower() == 'true'
    app.run(host='0.0.0.0', port=port, debug=debug_mode)
