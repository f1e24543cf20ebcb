from __future__ import annotations

from utils.error_handlers import (
    MethodNotAllowedError,
    PaginationError,
    ValidationError,
    redact_message,
)


def test_redact_message_scrubs_credentials_and_emails():
    token = 'pat' + 'A1b2C3d4' * 6
    message = f"401 from backing source: Bearer {token} for hr.admin@glampack.example"

    redacted = redact_message(message)

    assert token not in redacted
    assert 'hr.admin@glampack.example' not in redacted
    assert 'Bearer [REDACTED]' in redacted
    assert '[EMAIL]' in redacted


def test_redact_message_leaves_plain_text():
    assert redact_message('Read timed out. (read timeout=30)') == 'Read timed out. (read timeout=30)'


def test_method_not_allowed_lists_allowed_methods():
    error = MethodNotAllowedError('DELETE', ['POST', 'GET'])

    assert error.status_code == 405
    assert error.to_dict() == {
        'error': 'method_not_allowed',
        'message': 'Method DELETE is not allowed for this resource',
        'details': {'allowed_methods': ['GET', 'POST']}
    }


def test_details_omitted_when_empty():
    assert ValidationError('Request body must be valid JSON').to_dict() == {
        'error': 'validation_error',
        'message': 'Request body must be valid JSON'
    }


def test_pagination_error_is_bad_gateway():
    error = PaginationError('Backing source exceeded the 3 page limit', details={'pages_fetched': 3})

    assert error.status_code == 502
    assert error.to_dict()['details'] == {'pages_fetched': 3}
