"""
Logging utilities with sensitive data sanitization.
"""
import re
import json
from typing import Any


# Sensitive keys that should be redacted
SENSITIVE_KEYS = {
    'email', 'code', 'state', 'cookie', 'cookies', 'set-cookie',
    'token', 'access_token', 'id_token', 'refresh_token',
    'authorization', 'client_secret', 'password', 'secret'
}

# Query string parameters carrying OAuth secrets
SENSITIVE_QUERY_PARAMS = ('code', 'state', 'session_state', 'id_token', 'access_token')


def sanitize_for_logging(data: Any) -> Any:
    """
    Sanitize sensitive data before logging.

    Recursively processes dictionaries, lists, and strings to remove
    sensitive information like emails, authorization codes and tokens.

    Args:
        data: Data to sanitize (dict, str, list, or other types)

    Returns:
        Sanitized data safe for logging
    """
    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            if isinstance(key, str) and key.lower() in SENSITIVE_KEYS:
                sanitized[key] = '***REDACTED***'
            elif isinstance(value, (dict, list)):
                sanitized[key] = sanitize_for_logging(value)
            elif isinstance(value, str):
                sanitized[key] = sanitize_string(value)
            else:
                sanitized[key] = value
        return sanitized

    elif isinstance(data, list):
        return [sanitize_for_logging(item) for item in data]

    elif isinstance(data, str):
        return sanitize_string(data)

    return data


def sanitize_string(text: str) -> str:
    """
    Sanitize sensitive patterns in strings.

    Args:
        text: String to sanitize

    Returns:
        Sanitized string with sensitive patterns redacted
    """
    if not isinstance(text, str):
        return text

    # Redact email addresses
    text = re.sub(
        r'\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b',
        '***EMAIL***',
        text
    )

    # Redact OAuth secrets in query strings (code=..., state=...)
    text = re.sub(
        r'\b(' + '|'.join(SENSITIVE_QUERY_PARAMS) + r')=[^&;\s]*',
        r'\1=***REDACTED***',
        text
    )

    # Redact bearer tokens and JWTs
    text = re.sub(
        r'Bearer\s+[A-Za-z0-9._~+/=-]+',
        'Bearer ***TOKEN***',
        text
    )
    text = re.sub(
        r'eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*',
        '***JWT***',
        text
    )

    return text


def log_safe(message: str, data: Any = None) -> None:
    """
    Log a message with automatically sanitized data.

    Args:
        message: Log message
        data: Optional data to include (will be sanitized)
    """
    if data is not None:
        sanitized_data = sanitize_for_logging(data)
        if isinstance(sanitized_data, (dict, list)):
            print(f"{message}: {json.dumps(sanitized_data, default=str)}")
        else:
            print(f"{message}: {sanitized_data}")
    else:
        print(message)


def log_verification_event(step: str, email: str, success: bool, details: str = None) -> None:
    """
    Log a verification step for a user without exposing the mailbox name.

    Args:
        step: Verification step (e.g., "email", "callback")
        email: User's email (only the domain is logged)
        success: Whether the step succeeded
        details: Optional additional details
    """
    domain = email.split('@')[-1] if email and '@' in email else 'unknown'
    status = "SUCCESS" if success else "FAILED"

    if details:
        print(f"Verification {step} {status} for domain @{domain}: {details}")
    else:
        print(f"Verification {step} {status} for domain @{domain}")


def log_aad_error(operation: str, status_code: int, error_code: str = None) -> None:
    """
    Log AAD / Microsoft Graph errors without exposing response bodies.

    Args:
        operation: Operation that failed (e.g., "token_exchange", "get_me")
        status_code: HTTP status code
        error_code: AAD error code if available (e.g., "invalid_grant")
    """
    error_info = {
        'operation': operation,
        'status_code': status_code,
        'error_code': error_code
    }
    print(f"AAD API error: {json.dumps(error_info)}")
