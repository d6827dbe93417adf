"""
Contact model
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Semantic fields and their wire keys
CONTACT_FIELDS = ['name', 'email', 'phone', 'company']
RAW_PAYLOAD_KEY = 'rawPayload'


@dataclass
class ContactRecord:
    """Contact captured from a badge QR code or typed in by the operator"""
    name: Optional[Any] = None
    email: Optional[Any] = None
    phone: Optional[Any] = None
    company: Optional[Any] = None
    raw_payload: Optional[str] = None
    # Keys of a structured payload that are not semantic fields, kept verbatim
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> 'ContactRecord':
        """Build a record from a mapping without renaming any key"""
        record = cls()
        for key, value in data.items():
            if key in CONTACT_FIELDS and value is not None:
                setattr(record, key, value)
            elif key == RAW_PAYLOAD_KEY and isinstance(value, str):
                record.raw_payload = value
            else:
                record.extra[key] = value
        return record

    def detected_fields(self):
        return [name for name in CONTACT_FIELDS if _present(getattr(self, name))]

    def is_empty(self) -> bool:
        """True when no semantic field and no usable raw payload is present"""
        if self.detected_fields():
            return False
        if self.raw_payload and self.raw_payload.strip():
            return False
        return not any(_present(value) for value in self.extra.values())

    def to_dict(self):
        """Convert to dictionary"""
        data = {}
        for name in CONTACT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        if self.raw_payload is not None:
            data[RAW_PAYLOAD_KEY] = self.raw_payload
        data.update(self.extra)
        return data

    def __repr__(self):
        return f'<ContactRecord {self.name!r}>'


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True
