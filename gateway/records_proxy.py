"""
Records proxy for the HR Records Gateway.
Forwards /api/<resource>[/<record_id>] requests to Airtable with server-side credentials.
"""

import logging
from typing import Any, Optional

from flask import Blueprint, current_app, jsonify, request

from .translator import ForwardedRequest

# Setup logging
logger = logging.getLogger(__name__)

# Create blueprint
records_proxy_bp = Blueprint('records_proxy', __name__)

PROXIED_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE']


def get_gateway():
    return current_app.extensions['airtable_gateway']


def read_json_body() -> Optional[Any]:
    """Parse the request body as JSON whatever the declared content type; None if unparseable."""
    return request.get_json(force=True, silent=True)


@records_proxy_bp.route('/<path:resource_path>', methods=PROXIED_METHODS)
def proxy_records(resource_path: str):
    """
    Proxy a resource request to Airtable.

    GET without a record id returns every page of the table aggregated as
    ``{"records": [...]}``. All other calls relay Airtable's status and body.

    Query parameters:
        filterByFormula: Airtable formula applied to list requests

    Returns:
        2xx/4xx/5xx: Airtable status and body, passed through
        400: Missing record id or JSON body
        404: Unknown resource
        405: Method not enabled for the resource
        502: Pagination aborted
    """
    gateway = get_gateway()
    route = gateway.resolve(request.path, request.method)

    forwarded = ForwardedRequest(
        method=request.method,
        path=request.path,
        query=request.args.to_dict(),
        body=read_json_body() if request.method in ('POST', 'PATCH') else None,
        record_id=route.record_id_from(request.path)
    )

    response, headers = gateway.handle(route, forwarded)

    if not response.ok:
        logger.info(f"Airtable returned {response.status_code} for {forwarded.method} {route.name}")

    result = jsonify(response.body)
    result.status_code = response.status_code
    result.headers.update(headers)
    return result
