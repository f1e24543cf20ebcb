from __future__ import annotations

import pytest

from gateway.aggregator import aggregate_pages
from gateway.airtable_client import BackingResponse
from utils.error_handlers import PaginationError


def scripted(*pages):
    """Return a fetch_page stub that serves pages in order and records the cursors it was given."""
    queue = list(pages)
    cursors = []

    def fetch_page(cursor):
        cursors.append(cursor)
        return queue.pop(0)

    return fetch_page, cursors


def page(records, offset=None, status_code=200):
    body = {'records': records}
    if offset:
        body['offset'] = offset
    return BackingResponse(status_code=status_code, body=body)


def test_single_page_without_cursor():
    fetch_page, cursors = scripted(page([{'id': 'rec1'}, {'id': 'rec2'}]))

    result = aggregate_pages(fetch_page)

    assert result.status_code == 200
    assert result.body == {'records': [{'id': 'rec1'}, {'id': 'rec2'}]}
    assert cursors == [None]


def test_empty_result_is_still_success():
    fetch_page, _ = scripted(BackingResponse(status_code=200, body={}))

    result = aggregate_pages(fetch_page)

    assert result.status_code == 200
    assert result.body == {'records': []}


def test_pages_are_concatenated_in_cursor_order():
    fetch_page, cursors = scripted(
        page([{'id': 'a1'}, {'id': 'a2'}], offset='cur1'),
        page([{'id': 'b1'}], offset='cur2'),
        page([{'id': 'c1'}, {'id': 'c2'}, {'id': 'c3'}]),
    )

    result = aggregate_pages(fetch_page)

    assert [r['id'] for r in result.body['records']] == ['a1', 'a2', 'b1', 'c1', 'c2', 'c3']
    assert cursors == [None, 'cur1', 'cur2']


def test_failing_later_page_discards_accumulated_records():
    failure = BackingResponse(status_code=422, body={'error': {'type': 'INVALID_REQUEST_UNKNOWN'}})
    fetch_page, cursors = scripted(
        page([{'id': 'a1'}], offset='cur1'),
        page([{'id': 'b1'}], offset='cur2'),
        failure,
    )

    result = aggregate_pages(fetch_page)

    assert result is failure
    assert 'records' not in result.body
    assert cursors == [None, 'cur1', 'cur2']


def test_failing_first_page_is_returned_verbatim():
    failure = BackingResponse(status_code=401, body={'error': 'AUTHENTICATION_REQUIRED'})
    fetch_page, cursors = scripted(failure)

    assert aggregate_pages(fetch_page) is failure
    assert cursors == [None]


def test_repeated_cursor_aborts():
    fetch_page, cursors = scripted(
        page([{'id': 'a1'}], offset='stale'),
        page([{'id': 'a1'}], offset='stale'),
    )

    with pytest.raises(PaginationError) as excinfo:
        aggregate_pages(fetch_page)

    assert excinfo.value.status_code == 502
    assert cursors == [None, 'stale']


def test_page_cap_aborts():
    fetch_page, cursors = scripted(*[page([{'id': f'r{i}'}], offset=f'cur{i}') for i in range(5)])

    with pytest.raises(PaginationError) as excinfo:
        aggregate_pages(fetch_page, max_pages=3)

    assert excinfo.value.details == {'pages_fetched': 3}
    assert len(cursors) == 3
