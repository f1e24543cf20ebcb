"""
Resource route table for the HR Records Gateway.
Maps /api/<resource> path prefixes onto Airtable tables and the methods each accepts.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple

API_PREFIX = '/api'


@dataclass(frozen=True)
class ResourceRoute:
    """
    A single proxied resource.

    Attributes:
        name: Path segment under /api (e.g. 'leave-requests')
        table: Airtable table name, may contain spaces
        methods: HTTP methods enabled for this resource
        paginated: Whether list GETs follow the Airtable offset cursor
        cache_ttl: Seconds a cached GET stays fresh when caching is enabled
    """

    name: str
    table: str
    methods: FrozenSet[str]
    paginated: bool = True
    cache_ttl: int = 120

    @property
    def prefix(self) -> str:
        return f"{API_PREFIX}/{self.name}"

    def allows(self, method: str) -> bool:
        return method.upper() in self.methods

    def matches(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + '/')

    def record_id_from(self, path: str) -> Optional[str]:
        """Return the segment right after the prefix, or None when absent or empty."""
        remainder = path[len(self.prefix):].lstrip('/')
        segment = remainder.split('/', 1)[0]
        return segment or None


def _methods(*names: str) -> FrozenSet[str]:
    return frozenset(names)


FULL_CRUD = _methods('GET', 'POST', 'PATCH', 'DELETE')

# Checked in order; first match wins
DEFAULT_ROUTES: Tuple[ResourceRoute, ...] = (
    ResourceRoute('employees', 'Employees', FULL_CRUD, cache_ttl=300),
    ResourceRoute('attendance', 'Attendance', _methods('GET', 'POST', 'PATCH'), cache_ttl=30),
    ResourceRoute('leave-requests', 'Leave Requests', FULL_CRUD, cache_ttl=180),
    ResourceRoute('announcements', 'Announcements', FULL_CRUD, cache_ttl=120),
    ResourceRoute('announcement-comments', 'AnnouncementComments', _methods('GET', 'POST', 'DELETE'), cache_ttl=30),
    ResourceRoute('announcement-reads', 'AnnouncementReads', _methods('GET', 'POST'), cache_ttl=30),
    ResourceRoute('payroll', 'Payroll', FULL_CRUD, cache_ttl=300),
    ResourceRoute('medical-claims', 'Medical Claims', _methods('GET', 'POST', 'PATCH'), cache_ttl=300),
    ResourceRoute('birthday-wishes', 'Birthday Wishes', _methods('GET', 'POST')),
    ResourceRoute('emergency-contacts', 'Emergency Contact', FULL_CRUD, cache_ttl=300),
)


class RouteTable:
    """Ordered collection of resource routes."""

    def __init__(self, routes: Iterable[ResourceRoute] = DEFAULT_ROUTES):
        self.routes = tuple(routes)

    def __iter__(self):
        return iter(self.routes)

    def match(self, path: str) -> Optional[ResourceRoute]:
        """
        Find the route serving a path.

        Args:
            path: Inbound request path, e.g. '/api/employees/rec123'

        Returns:
            The first matching route, or None when nothing matches
        """
        for route in self.routes:
            if route.matches(path):
                return route
        return None
