from __future__ import annotations

import json

import requests

from config import IPLookupSettings
from integrations.ip_lookup import IPLookupResult, IPLookupService

from conftest import FakeResponse, FakeSession


def test_lookup_returns_location(client, ip_session):
    response = client.get('/api/iplookup', headers={'CF-Connecting-IP': '203.0.113.7'})

    assert response.status_code == 200
    data = response.get_json()
    assert data['city'] == 'Kuala Lumpur'
    assert data['country_code'] == 'MY'
    assert 'fallback' not in data
    method, url, kwargs = ip_session.calls[0]
    assert url == 'http://ip-api.com/json/203.0.113.7'
    assert 'regionName' in kwargs['params']['fields']


def test_alias_path_is_served(client):
    assert client.get('/iplookup').status_code == 200


def test_forwarded_for_header_is_used(client, ip_session):
    client.get('/api/iplookup', headers={'X-Forwarded-For': '198.51.100.4, 10.0.0.1'})

    assert ip_session.calls[0][1].endswith('/198.51.100.4')


def test_unreachable_service_degrades_to_fallback(make_app, ip_session):
    ip_session.error = requests.exceptions.ConnectionError('Name or service not known')
    client = make_app().test_client()

    response = client.get('/api/iplookup')

    assert response.status_code == 200
    data = response.get_json()
    assert data['fallback'] is True
    assert data['city'] == 'Unknown'
    assert data['latitude'] == 0


def test_lookup_needs_no_airtable_credentials(make_app):
    client = make_app(AIRTABLE_API_KEY=None, AIRTABLE_BASE_ID=None).test_client()

    assert client.get('/api/iplookup').status_code == 200


def test_non_success_status_is_degraded():
    service = IPLookupService(IPLookupSettings(), session=FakeSession(FakeResponse(429, {})))

    result = service.lookup('203.0.113.7')

    assert result.degraded
    assert result.to_dict()['error'] == 'IP lookup service unavailable'
    assert result.to_dict()['ip'] == '203.0.113.7'


def test_provider_failure_payload_is_degraded():
    payload = {'status': 'fail', 'message': 'reserved range', 'query': '10.0.0.1'}
    service = IPLookupService(IPLookupSettings(), session=FakeSession(FakeResponse(200, payload)))

    result = service.lookup('10.0.0.1')

    assert result.degraded
    assert result.error == 'reserved range'


def test_invalid_json_is_degraded():
    service = IPLookupService(IPLookupSettings(), session=FakeSession(FakeResponse(200, text='<html>')))

    assert service.lookup('203.0.113.7').degraded


def test_resolved_result_fills_missing_fields():
    result = IPLookupResult.resolved('203.0.113.7', {'status': 'success', 'city': 'Penang'})

    data = result.to_dict()
    assert data['city'] == 'Penang'
    assert data['region'] == 'Unknown'
    assert data['country_code'] == 'XX'
    assert data['timezone'] == 'UTC'
    assert data['latitude'] == 0


def test_non_object_json_is_degraded(make_app, ip_session):
    client = make_app().test_client()

    for payload in (None, ['unexpected'], 'ok'):
        ip_session.response = FakeResponse(200, text=json.dumps(payload))

        response = client.get('/api/iplookup', headers={'CF-Connecting-IP': '203.0.113.7'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['fallback'] is True
        assert data['error'] == 'IP lookup returned an invalid response'
