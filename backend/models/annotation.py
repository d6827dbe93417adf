"""
Operator annotation attached to a contact before submission
"""
from dataclasses import dataclass
from enum import Enum


class InterestLevel(str, Enum):
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'
    VERY_HIGH = 'VeryHigh'

    @classmethod
    def parse(cls, value) -> 'InterestLevel':
        """Accept the wire value ('VeryHigh'), the spaced label ('Very High') or the member name ('VERY_HIGH')"""
        if isinstance(value, cls):
            return value
        text = str(value or '').strip()
        for level in cls:
            if text == level.value or text.upper() == level.name:
                return level
            if text.replace(' ', '').lower() == level.value.replace(' ', '').lower():
                return level
        raise ValueError(f'Unknown interest level: {value!r}')


@dataclass
class Annotation:
    interest_level: InterestLevel = InterestLevel.MEDIUM
    notes: str = ''

    def add_note(self, suggestion: str):
        """Append a quick note on its own line"""
        if self.notes:
            self.notes = f'{self.notes}\n{suggestion}'
        else:
            self.notes = suggestion

    def to_dict(self):
        return {
            'interestLevel': self.interest_level.value,
            'notes': self.notes,
        }
