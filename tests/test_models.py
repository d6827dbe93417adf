"""Tests for the data models."""

import json
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from models.annotation import Annotation, InterestLevel
from models.contact import ContactRecord
from models.session_state import SessionState, StatusKind
from models.submission import SubmissionRecord, format_timestamp

NOW = datetime(2024, 5, 1, 9, 30, 0, 123456, tzinfo=timezone.utc)


class TestContactRecord:
    def test_from_mapping_keeps_unknown_keys(self):
        record = ContactRecord.from_mapping({'name': 'Jo', 'title': 'CTO'})
        assert record.name == 'Jo'
        assert record.extra == {'title': 'CTO'}

    def test_null_semantic_field_round_trips(self):
        record = ContactRecord.from_mapping({'name': None, 'email': 'a@b.co'})
        assert record.to_dict() == {'name': None, 'email': 'a@b.co'}

    def test_is_empty(self):
        assert ContactRecord().is_empty()
        assert ContactRecord(raw_payload='  ').is_empty()
        assert not ContactRecord(raw_payload='X').is_empty()
        assert not ContactRecord(company='Acme').is_empty()


class TestInterestLevel:
    @pytest.mark.parametrize('value', ['Very High', 'VeryHigh', 'VERY_HIGH', 'very high'])
    def test_parse_very_high(self, value):
        assert InterestLevel.parse(value) is InterestLevel.VERY_HIGH

    def test_very_high_wire_value(self):
        annotation = Annotation(interest_level=InterestLevel.parse('Very High'))
        assert annotation.to_dict()['interestLevel'] == 'VeryHigh'

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            InterestLevel.parse('Lukewarm')

    def test_annotation_defaults(self):
        annotation = Annotation()
        assert annotation.interest_level is InterestLevel.MEDIUM
        assert annotation.notes == ''

    def test_add_note_appends_lines(self):
        annotation = Annotation()
        annotation.add_note('Liste des prix')
        annotation.add_note('Besoin de devis')
        assert annotation.notes == 'Liste des prix\nBesoin de devis'


class TestSubmissionRecord:
    def test_timestamp_format(self):
        assert format_timestamp(NOW) == '2024-05-01T09:30:00.123Z'

    def test_flattening_defaults_to_empty_strings(self):
        record = ContactRecord(name='Jo')
        submission = SubmissionRecord.build(record, Annotation(), now=NOW)
        data = submission.to_dict()
        assert data['email'] == ''
        assert data['phone'] == ''
        assert data['company'] == ''
        assert all(isinstance(value, str) for value in data.values())

    def test_alias_chain(self):
        record = ContactRecord.from_mapping({
            'fullName': 'Grace Hopper',
            'phoneNumber': 5550100,
            'organization': 'Navy',
        })
        data = SubmissionRecord.build(record, Annotation(), now=NOW).to_dict()
        assert data['name'] == 'Grace Hopper'
        assert data['phone'] == '5550100'
        assert data['company'] == 'Navy'

    def test_raw_data_prefers_raw_payload(self):
        record = ContactRecord(raw_payload='???')
        submission = SubmissionRecord.build(record, Annotation(), now=NOW)
        assert submission.raw_data == '???'

    def test_raw_data_falls_back_to_json(self):
        record = ContactRecord(name='Jo', email='jo@x.com')
        submission = SubmissionRecord.build(record, Annotation(InterestLevel.HIGH, 'Call back'), now=NOW)
        assert json.loads(submission.raw_data) == {'name': 'Jo', 'email': 'jo@x.com'}
        assert submission.interest_level == 'High'
        assert submission.notes == 'Call back'

    def test_immutable(self):
        submission = SubmissionRecord.build(ContactRecord(name='Jo'), Annotation(), now=NOW)
        with pytest.raises(FrozenInstanceError):
            submission.name = 'Someone else'


class TestSessionState:
    def test_initial_state(self):
        state = SessionState()
        assert state.scanning_active is False
        assert state.current_record is None
        assert state.status.kind is StatusKind.INFO
        assert state.to_dict()['status'] == {'type': 'info', 'message': 'Ready to scan'}

    def test_clear_record_resets_annotation(self):
        state = SessionState(current_record=ContactRecord(name='Jo'))
        state.annotation.notes = 'x'
        state.clear_record()
        assert state.current_record is None
        assert state.annotation == Annotation()
