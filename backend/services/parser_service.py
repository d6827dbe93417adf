"""
Text parsing service for extracting contact fields from decoded badge QR text
Layered approach: structured payload first, then line heuristics,
comma-separated key:value pairs, and finally the first line as a name
"""
import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.contact import CONTACT_FIELDS, ContactRecord

# Label substrings per field (matched case-insensitively)
FIELD_LABELS = {
    'name': ('fn:', 'name:', 'fullname:', 'contact:'),
    'email': ('email:', 'mail:'),
    'phone': ('tel:', 'phone:', 'mobile:', 'contact:'),
    'company': ('org:', 'company:', 'organization:', 'firm:'),
}

FIELD_PATTERNS = {
    'name': re.compile(r'^[A-Za-z\s]+$', re.ASCII),
    'email': re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', re.ASCII),
    'phone': re.compile(r'[\d\s+()-]{8,}', re.ASCII),
}

LABEL_PREFIX = re.compile(r'^[^:]*:')
VALUE_PREFIX = re.compile(r'^[^=]*=')


@dataclass
class ExtractionResult:
    record: ContactRecord
    extraction_method: str
    total_lines: int = 0
    detected_fields: List[str] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'extracted_data': self.record.to_dict(),
            'parsing_metadata': {
                'total_lines': self.total_lines,
                'detected_fields': self.detected_fields,
                'missing_fields': self.missing_fields,
                'extraction_method': self.extraction_method,
            },
        }


class BadgeParser:
    """Parse decoded QR text into a best-effort contact record"""

    def parse(self, text: str) -> ExtractionResult:
        """
        Parse decoded text and report how the fields were found

        Args:
            text: Decoded QR payload

        Returns:
            ExtractionResult with the record and parsing metadata.
            Never raises; the worst case keeps the input as raw payload.
        """
        if text is None:
            text = ''
        lines = text.split('\n')

        structured = self._parse_structured(text)
        if structured is not None:
            record = ContactRecord.from_mapping(structured)
            return self._result(record, 'structured', lines)

        fields = self._parse_lines(lines)
        method = 'line_heuristic'

        if not fields:
            fields = self._parse_comma_separated(text)
            method = 'comma_separated'

        if 'name' not in fields and lines:
            first_line = lines[0].strip()
            if first_line:
                fields['name'] = first_line
                if len(fields) == 1:
                    method = 'first_line'

        if not fields:
            return self._result(ContactRecord(raw_payload=text), 'raw_payload', lines)

        return self._result(ContactRecord(**fields), method, lines)

    def extract(self, text: str) -> ContactRecord:
        return self.parse(text).record

    def _parse_structured(self, text: str) -> Optional[Dict]:
        """Return the payload as a dict when it is a JSON object"""
        try:
            parsed = json.loads(text)
        except (ValueError, TypeError):
            return None
        if isinstance(parsed, dict):
            return parsed
        return None

    def _parse_lines(self, lines: List[str]) -> Dict[str, str]:
        """Assign each field from the first line with a label or, failing that, a matching pattern"""
        fields = {}
        for line in lines:
            if _is_comma_record(line):
                continue
            lower_line = line.lower()
            for field_name in CONTACT_FIELDS:
                if field_name in fields:
                    continue
                value = None
                if any(label in lower_line for label in FIELD_LABELS[field_name]):
                    value = _strip_label(line)
                else:
                    pattern = FIELD_PATTERNS.get(field_name)
                    if pattern and pattern.search(line):
                        value = line.strip()
                if value:
                    fields[field_name] = value
        return fields

    def _parse_comma_separated(self, text: str) -> Dict[str, str]:
        """Fallback for payloads like 'name:Bob,phone:555-1234'"""
        fields = {}
        if ',' not in text:
            return fields
        for item in text.split(','):
            key, sep, value = item.partition(':')
            key = key.strip().lower()
            value = value.strip()
            if not sep or not key or not value:
                continue
            for field_name in CONTACT_FIELDS:
                if field_name in key and field_name not in fields:
                    fields[field_name] = value
        return fields

    def _result(self, record: ContactRecord, method: str, lines: List[str]) -> ExtractionResult:
        detected = record.detected_fields()
        return ExtractionResult(
            record=record,
            extraction_method=method,
            total_lines=len([line for line in lines if line.strip()]),
            detected_fields=detected,
            missing_fields=[f for f in CONTACT_FIELDS if f not in detected],
        )


def _strip_label(line: str) -> str:
    """Drop the label up to the first ':', then any 'key=' prefix of the value"""
    value = LABEL_PREFIX.sub('', line, count=1)
    return VALUE_PREFIX.sub('', value, count=1).strip()


def _is_comma_record(line: str) -> bool:
    """A line such as 'name:Bob,phone:555-1234' is left to the comma-separated fallback"""
    items = [item for item in line.split(',') if item.strip()]
    return len(items) >= 2 and all(':' in item for item in items)


_default_parser = BadgeParser()


def extract(text: str) -> ContactRecord:
    """Extract a contact record from decoded QR text"""
    return _default_parser.extract(text)
