"""
Cursor-following aggregation of paginated Airtable list responses.
"""

import logging
from typing import Callable, List, Optional

from utils.error_handlers import PaginationError

from .airtable_client import BackingResponse

# Setup logging
logger = logging.getLogger(__name__)

CURSOR_FIELD = 'offset'
RECORDS_FIELD = 'records'


def aggregate_pages(fetch_page: Callable[[Optional[str]], BackingResponse],
                    max_pages: int = 1000) -> BackingResponse:
    """
    Follow the backing source's cursor until it stops returning one.

    Pages are requested strictly in sequence; each cursor comes from the
    previous page. A failing page aborts the loop and is returned as-is, and
    records gathered from earlier pages are discarded.

    Args:
        fetch_page: Callable sending one list call for the given cursor (None for the first page)
        max_pages: Upper bound on pages followed before giving up

    Returns:
        BackingResponse with status 200 and ``{'records': [...]}``, or the first failing page

    Raises:
        PaginationError: If the source repeats a cursor or exceeds max_pages
    """
    records: List = []
    seen_cursors = set()
    cursor = None

    for page_number in range(1, max_pages + 1):
        page = fetch_page(cursor)

        if not page.ok:
            logger.warning(f"Aborting pagination on page {page_number}: backing source returned {page.status_code}")
            return page

        body = page.body if isinstance(page.body, dict) else {}
        records.extend(body.get(RECORDS_FIELD) or [])

        cursor = body.get(CURSOR_FIELD)
        if not cursor:
            logger.debug(f"Aggregated {len(records)} records over {page_number} page(s)")
            return BackingResponse(status_code=200, body={RECORDS_FIELD: records})

        if cursor in seen_cursors:
            raise PaginationError(
                'Backing source repeated a pagination cursor',
                details={'pages_fetched': page_number}
            )
        seen_cursors.add(cursor)

    raise PaginationError(
        f"Backing source exceeded the {max_pages} page limit",
        details={'pages_fetched': max_pages}
    )
