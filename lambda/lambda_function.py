"""
AWS Lambda handler for the AAD OAuth callback.
Verifies the callback, resolves the user's AAD email and checks it.
"""
import json
from aad_api import exchange_code_for_token, get_user_email
from aad_config import get_aad_config
from logging_utils import log_safe, log_verification_event
from oauth_verification import (
    text_response,
    verify_code_and_state,
    verify_email
)


CALLBACK_PATH = '/callback'

# Expires the state cookie once it has been checked
CLEAR_STATE_COOKIE = 'state=; Path=/; Max-Age=0; HttpOnly; Secure; SameSite=Lax'


def get_request_path(event: dict) -> str:
    """Get the request path from a REST (v1) or HTTP API (v2) event."""
    return event.get('rawPath') or event.get('path') or ''


def verified_response(email: str, metadata: dict) -> dict:
    """Build the success response for a verified user."""
    return {
        'statusCode': 200,
        'headers': {
            'Content-Type': 'application/json',
            'Set-Cookie': CLEAR_STATE_COOKIE
        },
        'body': json.dumps({
            'email': email,
            'metadata': metadata
        })
    }


def handle_callback(event: dict) -> dict:
    """
    Handle the OAuth authorization-code callback.

    Args:
        event: API Gateway event

    Returns:
        API Gateway response
    """
    verification = verify_code_and_state(event)
    if verification['error']:
        return verification['error']

    config = get_aad_config()

    access_token = exchange_code_for_token(verification['code'], config)
    if not access_token:
        return text_response('Failed to authenticate with AAD.', 502)

    email = get_user_email(access_token)
    if not email:
        return text_response('Could not read your AAD profile.', 502)

    result = verify_email(config, email)
    if result['error']:
        log_verification_event('email', email, False, f"status {result['error']['statusCode']}")
        return result['error']

    log_verification_event('email', email, True)
    return verified_response(email, result['metadata'])


def lambda_handler(event, context):
    """
    Main Lambda handler for the AAD OAuth callback.

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    log_safe("Event", event)

    path = get_request_path(event)
    if not path.rstrip('/').endswith(CALLBACK_PATH):
        print(f"WARNING: Unknown path: {path}")
        return text_response('Not found.', 404)

    try:
        return handle_callback(event)

    except Exception as e:
        print(f"ERROR: Exception handling callback: {e}")
        import traceback
        traceback.print_exc()
        return text_response('An internal error occurred.', 500)
