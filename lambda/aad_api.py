"""
Microsoft identity platform and Graph API calls.
Exchanges the authorization code and reads the signed-in user's email.
"""
import requests
from typing import Dict, Optional
from logging_utils import log_aad_error


TOKEN_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"
GRAPH_ME_URL = "https://graph.microsoft.com/v1.0/me"
SCOPE = "openid email User.Read"
REQUEST_TIMEOUT = 10


def _error_code(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get('error')
    # Graph nests the code, the token endpoint does not
    if isinstance(error, dict):
        return error.get('code')
    return error


def exchange_code_for_token(code: str, config: Dict[str, str]) -> Optional[str]:
    """
    Exchange an authorization code for an access token.

    Args:
        code: Authorization code from the callback
        config: AAD configuration (client id/secret, tenant, redirect URI)

    Returns:
        Access token, or None if the exchange failed
    """
    url = TOKEN_URL.format(tenant=config['AAD_TENANT_ID'])
    data = {
        'client_id': config['AAD_CLIENT_ID'],
        'client_secret': config['AAD_CLIENT_SECRET'],
        'grant_type': 'authorization_code',
        'code': code,
        'scope': SCOPE
    }
    if config.get('AAD_REDIRECT_URI'):
        data['redirect_uri'] = config['AAD_REDIRECT_URI']

    try:
        response = requests.post(url, data=data, timeout=REQUEST_TIMEOUT)

        if response.status_code == 200:
            access_token = response.json().get('access_token')
            if not access_token:
                print("ERROR: Token response did not include an access token")
            return access_token or None
        else:
            log_aad_error('token_exchange', response.status_code, _error_code(response))
            return None

    except requests.RequestException as e:
        print(f"Error exchanging authorization code: {e}")
        return None


def get_user_email(access_token: str) -> Optional[str]:
    """
    Get the signed-in user's email from Microsoft Graph.

    Args:
        access_token: Access token with User.Read scope

    Returns:
        The user's mail, falling back to userPrincipalName, or None
    """
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/json"
    }

    try:
        response = requests.get(GRAPH_ME_URL, headers=headers, timeout=REQUEST_TIMEOUT)

        if response.status_code == 200:
            profile = response.json()
            return profile.get('mail') or profile.get('userPrincipalName')
        else:
            log_aad_error('get_me', response.status_code, _error_code(response))
            return None

    except requests.RequestException as e:
        print(f"Error fetching AAD profile: {e}")
        return None
