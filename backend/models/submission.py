"""
Submission record sent to the spreadsheet endpoint
"""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from models.annotation import Annotation
from models.contact import ContactRecord

# Alternate keys of structured payloads, tried after the semantic field
FIELD_ALIASES = {
    'name': ['fullName'],
    'email': [],
    'phone': ['phoneNumber'],
    'company': ['organization'],
}


@dataclass(frozen=True)
class SubmissionRecord:
    """Immutable snapshot of one submission attempt; every field is a string"""
    timestamp: str
    name: str
    email: str
    phone: str
    company: str
    interest_level: str
    notes: str
    raw_data: str

    @classmethod
    def build(cls, record: ContactRecord, annotation: Annotation,
              now: Optional[datetime] = None) -> 'SubmissionRecord':
        """Flatten a contact and its annotation into the wire format"""
        now = now or datetime.now(timezone.utc)
        if record.raw_payload:
            raw_data = record.raw_payload
        elif isinstance(record.extra.get('rawData'), str) and record.extra['rawData']:
            raw_data = record.extra['rawData']
        else:
            raw_data = json.dumps(record.to_dict(), ensure_ascii=False)
        return cls(
            timestamp=format_timestamp(now),
            name=_flatten(record, 'name'),
            email=_flatten(record, 'email'),
            phone=_flatten(record, 'phone'),
            company=_flatten(record, 'company'),
            interest_level=annotation.interest_level.value,
            notes=annotation.notes,
            raw_data=raw_data,
        )

    def to_dict(self):
        """Convert to the wire dictionary"""
        return {
            'timestamp': self.timestamp,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company,
            'interestLevel': self.interest_level,
            'notes': self.notes,
            'rawData': self.raw_data,
        }


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds, e.g. 2024-05-01T09:30:00.000Z"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _flatten(record: ContactRecord, field_name: str) -> str:
    value = getattr(record, field_name)
    if not value:
        for alias in FIELD_ALIASES[field_name]:
            value = record.extra.get(alias)
            if value:
                break
    if value is None or value == '':
        return ''
    return str(value)
