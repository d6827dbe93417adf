"""
Data models
"""
from models.annotation import Annotation, InterestLevel
from models.contact import ContactRecord
from models.session_state import SessionState, Status, StatusKind
from models.submission import SubmissionRecord

__all__ = [
    'Annotation', 'InterestLevel', 'ContactRecord',
    'SessionState', 'Status', 'StatusKind', 'SubmissionRecord',
]
