"""
Central pytest configuration and fixtures for AAD OAuth callback tests.

This module provides reusable fixtures for:
- AWS SSM mocking
- Microsoft identity platform / Graph API mocking
- Environment variable setup
- API Gateway callback event factories
"""
import pytest
import sys
import os
from pathlib import Path
from unittest.mock import patch

# Add lambda directory to path for imports
lambda_dir = Path(__file__).parent.parent / 'lambda'
sys.path.insert(0, str(lambda_dir))

# AWS mocking
from moto import mock_aws
import boto3
import responses


AAD_ENV_VARS = (
    'AAD_EMAIL_REGEX', 'AAD_DENYLIST', 'AAD_CLIENT_ID',
    'AAD_CLIENT_SECRET', 'AAD_TENANT_ID', 'AAD_REDIRECT_URI', 'AAD_SSM_PREFIX'
)

TEST_EMAIL_REGEX = r'^[a-z]{2}(\d{2})(\d+)[a-z]?@student\.example\.edu$'
TEST_TENANT_ID = 'test-tenant'
TOKEN_URL = f'https://login.microsoftonline.com/{TEST_TENANT_ID}/oauth2/v2.0/token'
GRAPH_ME_URL = 'https://graph.microsoft.com/v1.0/me'


# ==============================================================================
# Environment Setup
# ==============================================================================

@pytest.fixture(scope='session', autouse=True)
def set_test_environment():
    """Set up test environment variables for all tests."""
    os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'

    yield


@pytest.fixture
def clean_aad_env(monkeypatch):
    """Remove AAD settings from the environment so SSM fallback is used."""
    for name in AAD_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    from ssm_utils import get_parameter
    get_parameter.cache_clear()
    yield monkeypatch
    get_parameter.cache_clear()


@pytest.fixture
def aad_env(clean_aad_env):
    """Complete AAD configuration supplied through environment variables."""
    clean_aad_env.setenv('AAD_EMAIL_REGEX', TEST_EMAIL_REGEX)
    clean_aad_env.setenv('AAD_DENYLIST', 'ab22001@student.example.edu,cd99000@student.example.edu')
    clean_aad_env.setenv('AAD_CLIENT_ID', 'test-client-id')
    clean_aad_env.setenv('AAD_CLIENT_SECRET', 'test-client-secret')
    clean_aad_env.setenv('AAD_TENANT_ID', TEST_TENANT_ID)
    clean_aad_env.setenv('AAD_REDIRECT_URI', 'https://verify.example.edu/callback')
    return clean_aad_env


# ==============================================================================
# AWS Lambda Fixtures
# ==============================================================================

@pytest.fixture
def lambda_context():
    """
    Mock AWS Lambda context object.

    Provides a realistic Lambda context for handler testing with:
    - Function metadata (name, version, memory)
    - Request IDs for tracing
    """
    class LambdaContext:
        def __init__(self):
            self.function_name = "aad-oauth-callback"
            self.function_version = "$LATEST"
            self.invoked_function_arn = (
                "arn:aws:lambda:us-east-1:123456789012:function:aad-oauth-callback"
            )
            self.memory_limit_in_mb = 128
            self.request_id = "test-request-id-12345"
            self.aws_request_id = "test-request-id-12345"
            self._remaining_time_ms = 30000

        def get_remaining_time_in_millis(self):
            """Return remaining execution time in milliseconds."""
            return self._remaining_time_ms

    return LambdaContext()


# ==============================================================================
# AWS SSM Fixtures
# ==============================================================================

@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'


@pytest.fixture
def mock_ssm(aws_credentials):
    """Mock SSM client patched into ssm_utils, with an empty parameter store."""
    from ssm_utils import get_parameter

    with mock_aws():
        ssm = boto3.client('ssm', region_name='us-east-1')
        get_parameter.cache_clear()
        with patch('ssm_utils.ssm_client', ssm):
            yield ssm
        get_parameter.cache_clear()


# ==============================================================================
# AAD API Fixtures
# ==============================================================================

@pytest.fixture
def mock_aad_api():
    """Mock Microsoft identity platform and Graph API with responses library."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def mock_aad_login(mock_aad_api):
    """
    Factory that mocks a successful token exchange and Graph profile lookup.

    Returns a callable taking the email Graph should report.
    """
    def _login(email='ab22123@student.example.edu'):
        mock_aad_api.add(
            responses.POST,
            TOKEN_URL,
            json={'access_token': 'test-access-token', 'token_type': 'Bearer'},
            status=200
        )
        mock_aad_api.add(
            responses.GET,
            GRAPH_ME_URL,
            json={'mail': email, 'userPrincipalName': email},
            status=200
        )
        return mock_aad_api

    return _login


# ==============================================================================
# Helper Functions
# ==============================================================================

def create_callback_event(code='test-code', state='test-state', cookie_state='test-state',
                          path='/callback', extra_cookies=None):
    """
    Create an HTTP API (v2) callback event.

    Pass None for code/state/cookie_state to leave them out of the request.
    """
    query = []
    if code is not None:
        query.append(f'code={code}')
    if state is not None:
        query.append(f'state={state}')

    cookies = list(extra_cookies or [])
    if cookie_state is not None:
        cookies.append(f'state={cookie_state}')

    headers = {'host': 'verify.example.edu'}
    if cookies:
        headers['cookie'] = '; '.join(cookies)

    return {
        'version': '2.0',
        'rawPath': path,
        'rawQueryString': '&'.join(query),
        'headers': headers,
        'requestContext': {'http': {'method': 'GET', 'path': path}}
    }


def assert_text_response(response, expected_status, expected_body):
    """Assert response is a plaintext response with the given status and body."""
    assert response['statusCode'] == expected_status, \
        f"Expected status {expected_status}, got {response['statusCode']}"
    assert response['body'] == expected_body
    assert response['headers']['Content-Type'].startswith('text/plain')
