"""Shared test fixtures for the Badge Scanner API."""

import pytest

from app import create_app
from fakes import FakeDecoder, FakeHTTPSession


@pytest.fixture
def decoder():
    return FakeDecoder()


@pytest.fixture
def http_session():
    return FakeHTTPSession()


@pytest.fixture
def app(decoder, http_session):
    return create_app('testing', decoder=decoder, http_session=http_session)


@pytest.fixture
def intake(app):
    return app.extensions['intake']


@pytest.fixture
def client(app):
    return app.test_client()
