"""
OAuth callback verification helpers.
Pure functions that check the callback request and the user's AAD email.
"""
import re
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs, unquote
from werkzeug.http import parse_cookie


# Year suffixes above this belong to the 1900s
YEAR_PIVOT = 80

MISSING_CODE_MESSAGE = 'Missing OAuth authorization code.'
CSRF_MESSAGE = 'Cross-site request forgery detected.'
INVALID_EMAIL_MESSAGE = 'Your email is not valid for this AAD.'
DENYLISTED_EMAIL_MESSAGE = 'Nice try ;)'


def text_response(message: str, status_code: int) -> dict:
    """Build a plaintext Lambda proxy response."""
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'text/plain; charset=utf-8'},
        'body': message
    }


def get_query_parameter(request: Dict[str, Any], name: str) -> Optional[str]:
    """
    Get the first value of a query string parameter.

    HTTP API (v2) events carry the raw query string, REST (v1) events the
    multi-value parameter map, whose single-value map keeps the last value.

    Args:
        request: API Gateway event
        name: Parameter name

    Returns:
        Parameter value, or None if absent
    """
    raw_query = request.get('rawQueryString')
    if raw_query is not None:
        values = parse_qs(raw_query, keep_blank_values=True).get(name)
        return values[0] if values else None

    multi_params = request.get('multiValueQueryStringParameters') or {}
    values = multi_params.get(name)
    if values:
        return values[0]

    params = request.get('queryStringParameters') or {}
    return params.get(name)


def get_cookie(request: Dict[str, Any], name: str) -> Optional[str]:
    """
    Get a cookie value from the request.

    Args:
        request: API Gateway event
        name: Cookie name

    Returns:
        Decoded cookie value, or None if the cookie is absent
    """
    headers = request.get('headers') or {}
    parts = [value for key, value in headers.items() if key.lower() == 'cookie' and value]
    parts.extend(request.get('cookies') or [])

    value = parse_cookie('; '.join(parts)).get(name)
    if value is None:
        return None
    return unquote(value)


def verify_code_and_state(request: Dict[str, Any]) -> dict:
    """
    Verify the callback carries an authorization code and that the state
    parameter equals the user's state cookie.

    Args:
        request: API Gateway event for the OAuth callback

    Returns:
        {'code': ..., 'state': ..., 'error': False} on success,
        {'error': response} otherwise
    """
    code = get_query_parameter(request, 'code')
    state = get_query_parameter(request, 'state')
    state_cookie = get_cookie(request, 'state')

    if not code:
        print("ERROR: Callback is missing the authorization code")
        return {'error': text_response(MISSING_CODE_MESSAGE, 400)}

    # Absent query state and absent cookie compare equal
    if state != state_cookie:
        print("ERROR: State parameter does not match state cookie")
        return {'error': text_response(CSRF_MESSAGE, 403)}

    return {
        'code': code,
        'error': False,
        'state': state
    }


def expand_year(last_two_digits: int) -> int:
    """Expand a two-digit year suffix into a four-digit year."""
    if last_two_digits > YEAR_PIVOT:
        return 1900 + last_two_digits
    return 2000 + last_two_digits


def verify_email(env: Mapping[str, str], email: str) -> dict:
    """
    Verify the user's email adheres to the organization's conventions.

    The first capture group of AAD_EMAIL_REGEX is read as a two-digit year,
    the second as the user's index. Digit and word classes match ASCII only.

    Args:
        env: Configuration with AAD_EMAIL_REGEX and AAD_DENYLIST
        email: User's email

    Returns:
        {'error': None, 'metadata': {'index': ..., 'year': ...}} on success,
        {'error': response} otherwise
    """
    match = re.search(env['AAD_EMAIL_REGEX'], email, re.ASCII)
    if not match:
        return {'error': text_response(INVALID_EMAIL_MESSAGE, 403)}

    forbidden_addresses = env['AAD_DENYLIST'].split(',')
    if email in forbidden_addresses:
        print("WARNING: Denylisted email attempted verification")
        return {'error': text_response(DENYLISTED_EMAIL_MESSAGE, 403)}

    groups = match.groups() + (None, None)
    year_digits, index = groups[0], groups[1]
    if year_digits and index:
        try:
            return {
                'error': None,
                'metadata': {
                    'index': int(index),
                    'year': expand_year(int(year_digits))
                }
            }
        except ValueError:
            print("WARNING: AAD_EMAIL_REGEX captured non-numeric metadata")

    return {
        'error': None,
        'metadata': {
            'index': 0,
            'year': 0
        }
    }
