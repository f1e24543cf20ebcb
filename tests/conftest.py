from __future__ import annotations

import json

import pytest

from app import create_app
from gateway.airtable_client import BackingResponse


class FakeAirtable:
    """Scripted stand-in for the Airtable backing client; records every call it receives."""

    def __init__(self):
        self.responses = []
        self.calls = []

    def queue(self, status_code, body):
        self.responses.append(BackingResponse(status_code=status_code, body=body))
        return self

    def fail_with(self, error):
        self.responses.append(error)
        return self

    def send(self, call):
        self.calls.append(call)
        if not self.responses:
            raise AssertionError(f"unexpected backing call: {call.method} {call.url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeResponse:
    """Minimal requests.Response double."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def content(self):
        if self._text is not None:
            return self._text.encode()
        if self._payload is None:
            return b''
        return json.dumps(self._payload).encode()

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        if self._payload is None:
            raise ValueError('Expecting value: line 1 column 1 (char 0)')
        return self._payload


class FakeSession:
    """requests.Session double returning one scripted response or raising one error."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def request(self, method, url, **kwargs):
        return self._respond(method, url, **kwargs)

    def get(self, url, **kwargs):
        return self._respond('GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond('POST', url, **kwargs)


@pytest.fixture()
def airtable():
    return FakeAirtable()


@pytest.fixture()
def ip_session():
    return FakeSession(FakeResponse(200, {
        'status': 'success',
        'query': '203.0.113.7',
        'lat': 3.139,
        'lon': 101.6869,
        'city': 'Kuala Lumpur',
        'regionName': 'Kuala Lumpur',
        'country': 'Malaysia',
        'countryCode': 'MY',
        'timezone': 'Asia/Kuala_Lumpur',
        'isp': 'Example ISP'
    }))


@pytest.fixture()
def cloudinary_session():
    return FakeSession(FakeResponse(200, {
        'secure_url': 'https://res.cloudinary.com/demo/image/upload/v1/receipt.jpg',
        'public_id': 'glampack-hr/medical-receipts/receipt',
        'format': 'jpg',
        'resource_type': 'image',
        'bytes': 2048,
        'width': 640,
        'height': 480,
        'created_at': '2026-10-01T09:00:00Z'
    }))


@pytest.fixture()
def make_app(airtable, ip_session, cloudinary_session):
    def factory(**overrides):
        config = {'ENVIRONMENT': 'testing'}
        config.update(overrides)
        return create_app(
            config,
            airtable_client=airtable,
            ip_session=ip_session,
            cloudinary_session=cloudinary_session
        )
    return factory


@pytest.fixture()
def app(make_app):
    return make_app()


@pytest.fixture()
def client(app):
    return app.test_client()
