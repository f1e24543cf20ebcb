"""
Translation of inbound gateway requests into Airtable REST calls.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

from config import GatewaySettings
from utils.error_handlers import ValidationError

from .routes import ResourceRoute

FILTER_PARAM = 'filterByFormula'
CURSOR_PARAM = 'offset'
PAGE_SIZE_PARAM = 'pageSize'

BODY_METHODS = frozenset(('POST', 'PATCH'))
RECORD_METHODS = frozenset(('PATCH', 'DELETE'))


@dataclass(frozen=True)
class ForwardedRequest:
    """Inbound call as seen by the gateway, fixed once built."""

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    body: Optional[Any] = None
    record_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'method', self.method.upper())
        object.__setattr__(self, 'query', MappingProxyType(dict(self.query)))

    @property
    def is_list(self) -> bool:
        return self.method == 'GET' and self.record_id is None


@dataclass(frozen=True)
class BackingCall:
    """One fully specified request against the backing data source."""

    method: str
    url: str
    headers: Mapping[str, str]
    json: Optional[Any] = None


def table_url(settings: GatewaySettings, route: ResourceRoute, record_id: Optional[str] = None) -> str:
    """
    Build the Airtable URL for a table or a single record.

    Table names containing spaces (e.g. 'Leave Requests') are percent-encoded.
    """
    url = f"{settings.api_url}/{quote(settings.base_id, safe='')}/{quote(route.table, safe='')}"
    if record_id:
        url += f"/{quote(record_id, safe='')}"
    return url


def backing_headers(settings: GatewaySettings) -> Dict[str, str]:
    return {
        'Authorization': f"Bearer {settings.api_key}",
        'Content-Type': 'application/json',
    }


def build_backing_call(settings: GatewaySettings, route: ResourceRoute, forwarded: ForwardedRequest,
                       cursor: Optional[str] = None) -> BackingCall:
    """
    Convert a forwarded request into exactly one backing call.

    Args:
        settings: Gateway settings holding the Airtable credentials
        route: Route the request matched
        forwarded: The inbound request
        cursor: Pagination cursor from the previous page, if any

    Returns:
        BackingCall ready to send

    Raises:
        ValidationError: If a record id or JSON body is required but missing
    """
    method = forwarded.method

    if method in RECORD_METHODS and not forwarded.record_id:
        raise ValidationError(f"A record identifier is required for {method} requests")

    url = table_url(settings, route, forwarded.record_id)

    if forwarded.is_list:
        params = []
        if route.paginated:
            params.append((PAGE_SIZE_PARAM, str(settings.page_size)))
        filter_formula = forwarded.query.get(FILTER_PARAM)
        if filter_formula:
            params.append((FILTER_PARAM, filter_formula))
        if cursor:
            params.append((CURSOR_PARAM, cursor))
        if params:
            url += '?' + urlencode(params, quote_via=quote, safe='')

    body = None
    if method in BODY_METHODS:
        if forwarded.body is None:
            raise ValidationError('Request body must be valid JSON')
        body = forwarded.body

    return BackingCall(method=method, url=url, headers=backing_headers(settings), json=body)
