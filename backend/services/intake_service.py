"""
Intake session: owns the session state and applies every operator action to it
"""
import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from models.annotation import InterestLevel
from models.contact import CONTACT_FIELDS, ContactRecord
from models.session_state import READY_MESSAGE, SessionState, Status
from services.capture_session import CaptureSessionController
from services.errors import (
    NoDataToSubmitError,
    SubmissionError,
    SubmissionInProgressError,
    ValidationError,
)
from services.submission_service import SubmissionCoordinator

logger = logging.getLogger(__name__)

DEFAULT_NOTE_SUGGESTIONS = [
    'Demande fiche technique',
    'Liste des prix',
    'Besoin de devis',
    'Rendez-vous de suivi',
    'Appel de rappel',
    'Documentation technique',
    'Démonstration produit',
    'Test',
    'Réunion commerciale',
    'Projet en cours',
]


class IntakeService:
    """Single intake session shared by the API routes"""

    def __init__(self, decoder, coordinator: SubmissionCoordinator,
                 note_suggestions: Optional[List[str]] = None, **capture_options):
        self.state = SessionState()
        self._lock = threading.RLock()
        self.capture = CaptureSessionController(self.state, decoder, lock=self._lock, **capture_options)
        self.coordinator = coordinator
        self._note_suggestions = list(note_suggestions or DEFAULT_NOTE_SUGGESTIONS)
        self.manual_form = _blank_form()

    def snapshot(self) -> Dict:
        """Read-only view for the presentation layer"""
        with self._lock:
            data = self.state.to_dict()
            data['manual_entry'] = dict(self.manual_form)
            return data

    def manual_entry(self, fields: Dict) -> ContactRecord:
        """Use operator-typed fields as the current contact; a name is required"""
        values = {name: fields.get(name, '') for name in CONTACT_FIELDS}
        values = {name: '' if value is None else str(value) for name, value in values.items()}
        with self._lock:
            self.manual_form = dict(values)
            if not values['name'].strip():
                error = ValidationError()
                self.state.status = Status.error(error.message)
                raise error
            record = ContactRecord(**values)
            self.state.current_record = record
            self.state.status = Status.success('Information collected successfully!')
            logger.info('Manual entry accepted for %r', record.name)
            return record

    def set_interest_level(self, level) -> InterestLevel:
        try:
            parsed = InterestLevel.parse(level)
        except ValueError:
            raise ValidationError(f'Unknown interest level: {level}')
        with self._lock:
            self.state.annotation.interest_level = parsed
        return parsed

    def set_notes(self, notes: str):
        with self._lock:
            self.state.annotation.notes = notes or ''

    def add_note_suggestion(self, suggestion: str) -> str:
        if not suggestion or not suggestion.strip():
            raise ValidationError('Note suggestion is empty')
        with self._lock:
            self.state.annotation.add_note(suggestion)
            return self.state.annotation.notes

    def note_suggestions(self) -> List[str]:
        return list(self._note_suggestions)

    def reset(self):
        """Clear the contact, annotation and manual form; keep the last submission"""
        with self._lock:
            self._clear()
            self.state.status = Status.info(READY_MESSAGE)

    def submit(self):
        """
        Submit the current contact

        Only one submission runs at a time. The network call happens outside
        the state lock so the session stays readable while it is in flight.
        """
        with self._lock:
            if self.state.submitting:
                raise SubmissionInProgressError()
            record = self.state.current_record
            if record is None:
                error = NoDataToSubmitError()
                self.state.status = Status.error(error.message)
                raise error
            annotation = replace(self.state.annotation)
            self.state.submitting = True
            self.state.status = Status.info('Submitting data...')

        try:
            submission = self.coordinator.submit(record, annotation)
        except SubmissionError as e:
            with self._lock:
                self.state.status = Status.error(e.message)
            raise
        finally:
            with self._lock:
                self.state.submitting = False

        with self._lock:
            self.state.last_submission = submission
            if self.state.current_record is record:
                self._clear()
            self.state.status = Status.success('Data submitted successfully!')
        logger.info('Submission stored at %s', submission.timestamp)
        return submission

    def close(self):
        self.capture.dispose()

    def _clear(self):
        self.state.clear_record()
        self.manual_form = _blank_form()


def _blank_form():
    return {name: '' for name in CONTACT_FIELDS}
