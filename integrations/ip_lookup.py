"""
IP geolocation lookup for the HR Records Gateway.
Used to enrich attendance check-ins; it never fails the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from flask import Blueprint, current_app, jsonify, request

from config import IPLookupSettings

# Setup logging
logger = logging.getLogger(__name__)

# Create blueprint
ip_lookup_bp = Blueprint('ip_lookup', __name__)

LOOKUP_FIELDS = 'status,message,country,countryCode,region,regionName,city,lat,lon,timezone,isp,query'
UNKNOWN = 'Unknown'


@dataclass(frozen=True)
class IPLookupResult:
    """
    Outcome of a geolocation lookup.

    A resolved result carries the provider's location fields. A degraded
    result means the provider could not be used and only placeholder values
    are available; ``error`` says why.
    """

    ip: str
    location: Dict[str, Any] = field(default_factory=dict)
    degraded: bool = False
    error: Optional[str] = None

    @classmethod
    def resolved(cls, ip: str, payload: Dict[str, Any]) -> 'IPLookupResult':
        return cls(ip=payload.get('query') or ip, location={
            'latitude': payload.get('lat') or 0,
            'longitude': payload.get('lon') or 0,
            'city': payload.get('city') or UNKNOWN,
            'region': payload.get('regionName') or UNKNOWN,
            'country_name': payload.get('country') or UNKNOWN,
            'country_code': payload.get('countryCode') or 'XX',
            'timezone': payload.get('timezone') or 'UTC',
            'isp': payload.get('isp') or UNKNOWN
        })

    @classmethod
    def fallback(cls, ip: str, reason: str) -> 'IPLookupResult':
        return cls(ip=ip, degraded=True, error=reason, location={
            'latitude': 0,
            'longitude': 0,
            'city': UNKNOWN,
            'region': UNKNOWN,
            'country_name': UNKNOWN
        })

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'ip': self.ip, **self.location}
        if self.degraded:
            data['fallback'] = True
            data['error'] = self.error
        return data


class IPLookupService:
    """Client for the ip-api.com JSON endpoint."""

    def __init__(self, settings: IPLookupSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def lookup(self, ip: str) -> IPLookupResult:
        """
        Geolocate an IP address.

        Args:
            ip: Client IP address

        Returns:
            Resolved result, or a degraded one if the provider is unavailable
        """
        url = f"{self.settings.base_url}/{ip}"
        try:
            response = self.session.get(
                url,
                params={'fields': LOOKUP_FIELDS},
                headers={'Accept': 'application/json'},
                timeout=self.settings.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"IP lookup request failed: {str(e)}")
            return IPLookupResult.fallback(ip, str(e))

        if not response.ok:
            logger.warning(f"IP lookup service returned {response.status_code}")
            return IPLookupResult.fallback(ip, 'IP lookup service unavailable')

        try:
            payload = response.json()
        except ValueError:
            logger.warning("IP lookup service returned a non-JSON body")
            return IPLookupResult.fallback(ip, 'IP lookup returned an invalid response')

        if not isinstance(payload, dict):
            logger.warning(f"IP lookup service returned a {type(payload).__name__} instead of an object")
            return IPLookupResult.fallback(ip, 'IP lookup returned an invalid response')

        if payload.get('status') == 'fail':
            return IPLookupResult.fallback(ip, payload.get('message') or 'IP lookup failed')

        return IPLookupResult.resolved(ip, payload)


def get_client_ip() -> str:
    """Client address as reported by the edge proxy, falling back to the socket peer."""
    forwarded_for = request.headers.get('X-Forwarded-For', '')
    return (
        request.headers.get('CF-Connecting-IP')
        or forwarded_for.split(',')[0].strip()
        or request.remote_addr
        or 'unknown'
    )


@ip_lookup_bp.route('/api/iplookup', methods=['GET'])
@ip_lookup_bp.route('/iplookup', methods=['GET'])
def ip_lookup():
    """
    Look up the caller's approximate location.

    Returns:
        200: Location fields, or the fallback shape with ``fallback: true``
    """
    result = current_app.extensions['ip_lookup'].lookup(get_client_ip())
    return jsonify(result.to_dict()), 200
