"""
Airtable gateway service.
Resolves a forwarded request to its route, talks to the backing source and shapes the result.
"""

import logging
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

from config import GatewaySettings
from utils.error_handlers import MethodNotAllowedError, NotFoundError

from .aggregator import aggregate_pages
from .airtable_client import AirtableClient, BackingResponse
from .cache import ResponseCache
from .routes import ResourceRoute, RouteTable
from .translator import ForwardedRequest, build_backing_call

# Setup logging
logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    'Cache-Control': 'no-cache, no-store, must-revalidate',
    'Pragma': 'no-cache',
    'Expires': '0'
}


class AirtableGateway:
    """
    Proxy-and-paginate gateway in front of one Airtable base.

    Args:
        settings: Credentials and tuning, fixed for the lifetime of the gateway
        client: Backing client; anything with ``send(call) -> BackingResponse``
        routes: Route table, defaults to the HR resources
        cache: Response cache, used only when ``settings.cache_enabled`` is set
    """

    def __init__(self, settings: GatewaySettings, client=None, routes: Optional[RouteTable] = None,
                 cache: Optional[ResponseCache] = None):
        self.settings = settings
        self.client = client or AirtableClient(timeout=settings.timeout)
        self.routes = routes or RouteTable()
        self.cache = cache if cache is not None else ResponseCache()

    def resolve(self, path: str, method: str) -> ResourceRoute:
        """
        Find the route for a path and check the method against it.

        Raises:
            NotFoundError: If no route matches
            MethodNotAllowedError: If the route does not enable the method
        """
        route = self.routes.match(path)
        if route is None:
            raise NotFoundError()
        if not route.allows(method):
            raise MethodNotAllowedError(method.upper(), list(route.methods))
        return route

    def handle(self, route: ResourceRoute, forwarded: ForwardedRequest) -> Tuple[BackingResponse, Dict[str, str]]:
        """
        Serve a forwarded request.

        Args:
            route: Route returned by resolve()
            forwarded: The inbound request

        Returns:
            Tuple of (response to relay, extra response headers)
        """
        if forwarded.method == 'GET':
            return self._read(route, forwarded)

        response = self.client.send(build_backing_call(self.settings, route, forwarded))
        if self.settings.cache_enabled and response.ok:
            self.cache.invalidate(route.name)
        return response, {}

    def _read(self, route: ResourceRoute, forwarded: ForwardedRequest) -> Tuple[BackingResponse, Dict[str, str]]:
        aggregated = forwarded.is_list and route.paginated

        cache_key = None
        if self.settings.cache_enabled:
            cache_key = ResponseCache.make_key('GET', forwarded.path, urlencode(sorted(forwarded.query.items())))
            cached = self.cache.get(cache_key)
            if cached is not None:
                hit_headers = dict(NO_STORE_HEADERS) if aggregated else {}
                hit_headers['X-Cache'] = 'HIT'
                return cached, hit_headers

        headers: Dict[str, str] = {}
        if aggregated:
            response = self.list_records(route, forwarded)
            if response.ok:
                headers.update(NO_STORE_HEADERS)
        else:
            response = self.client.send(build_backing_call(self.settings, route, forwarded))

        if cache_key is not None:
            headers['X-Cache'] = 'MISS'
            if response.ok:
                self.cache.set(cache_key, route.name, response, route.cache_ttl)

        return response, headers

    def list_records(self, route: ResourceRoute, forwarded: ForwardedRequest) -> BackingResponse:
        """Fetch every page of a list, following the cursor."""
        def fetch_page(cursor):
            return self.client.send(build_backing_call(self.settings, route, forwarded, cursor=cursor))

        return aggregate_pages(fetch_page, max_pages=self.settings.max_pages)
