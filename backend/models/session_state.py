"""
Session state for the single active intake session
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from models.annotation import Annotation
from models.contact import ContactRecord
from models.submission import SubmissionRecord

READY_MESSAGE = 'Ready to scan'


class StatusKind(str, Enum):
    INFO = 'info'
    SUCCESS = 'success'
    ERROR = 'error'


@dataclass(frozen=True)
class Status:
    kind: StatusKind
    message: str

    @classmethod
    def info(cls, message):
        return cls(StatusKind.INFO, message)

    @classmethod
    def success(cls, message):
        return cls(StatusKind.SUCCESS, message)

    @classmethod
    def error(cls, message):
        return cls(StatusKind.ERROR, message)

    def to_dict(self):
        return {'type': self.kind.value, 'message': self.message}


@dataclass
class SessionState:
    """Process-wide state; mutated only by the intake session and capture controller"""
    scanning_active: bool = False
    camera_available: bool = False
    capture_state: str = 'idle'
    submitting: bool = False
    current_record: Optional[ContactRecord] = None
    annotation: Annotation = field(default_factory=Annotation)
    status: Status = field(default_factory=lambda: Status.info(READY_MESSAGE))
    last_submission: Optional[SubmissionRecord] = None

    def clear_record(self):
        """Drop the current contact together with its annotation"""
        self.current_record = None
        self.annotation = Annotation()

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'scanning_active': self.scanning_active,
            'camera_available': self.camera_available,
            'capture_state': self.capture_state,
            'submitting': self.submitting,
            'current_record': self.current_record.to_dict() if self.current_record else None,
            'annotation': self.annotation.to_dict(),
            'status': self.status.to_dict(),
            'last_submission': self.last_submission.to_dict() if self.last_submission else None,
        }
