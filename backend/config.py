"""
Configuration settings
"""
import os


def _float_or_none(value):
    return float(value) if value else None


def _list(value, default):
    if not value:
        return default
    return [item.strip() for item in value.split('|') if item.strip()]


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB badge images

    # Spreadsheet web app receiving submissions
    SHEETS_ENDPOINT_URL = os.getenv('SHEETS_ENDPOINT_URL')
    SUBMISSION_CONTENT_TYPE = os.getenv('SUBMISSION_CONTENT_TYPE', 'text/plain')
    SUBMISSION_TIMEOUT = _float_or_none(os.getenv('SUBMISSION_TIMEOUT'))

    # Scanner settings
    SCANNER_ENABLED = os.getenv('SCANNER_ENABLED', 'true').lower() == 'true'
    SCANNER_FPS = int(os.getenv('SCANNER_FPS', '10'))
    SCANNER_QRBOX = int(os.getenv('SCANNER_QRBOX', '250'))
    PREFERRED_FACING = os.getenv('PREFERRED_FACING', 'environment')
    MAX_CAMERA_PROBE = int(os.getenv('MAX_CAMERA_PROBE', '4'))

    # Hosts treated as secure without HTTPS
    TRUSTED_HOSTS = _list(os.getenv('TRUSTED_HOSTS'), ['localhost', '127.0.0.1', '::1'])

    # Quick notes offered to the operator, '|' separated
    NOTE_SUGGESTIONS = _list(os.getenv('NOTE_SUGGESTIONS'), None)


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Test configuration"""
    TESTING = True
    SHEETS_ENDPOINT_URL = 'https://sheets.example.test/exec'
    SCANNER_ENABLED = False


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
