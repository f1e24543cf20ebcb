"""
HTTP client for the Airtable backing data source.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .translator import BackingCall

# Setup logging
logger = logging.getLogger(__name__)

USER_AGENT = 'HR-Records-Gateway/1.0'


@dataclass
class BackingResponse:
    """Status and decoded JSON body relayed back to the caller."""

    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class AirtableClient:
    """
    Sends backing calls with a shared requests session.

    Anything with a compatible ``send(call) -> BackingResponse`` method can stand in
    for this class, which is how the tests script the backing source.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 30):
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, call: BackingCall) -> BackingResponse:
        """
        Execute a backing call.

        Args:
            call: Fully built call (URL, method, headers, body)

        Returns:
            BackingResponse with the source's status code and JSON body

        Raises:
            requests.RequestException: On network failure
            ValueError: If the source returns a body that is not JSON
        """
        response = self.session.request(
            call.method,
            call.url,
            headers={'User-Agent': USER_AGENT, **call.headers},
            json=call.json,
            timeout=self.timeout
        )

        logger.debug(f"Airtable {call.method} -> {response.status_code}")

        body = response.json() if response.content else {}
        return BackingResponse(status_code=response.status_code, body=body)
