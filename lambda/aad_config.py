"""
AAD configuration loading.
Values come from environment variables, with SSM Parameter Store as fallback.
"""
import os
from typing import Dict
from ssm_utils import get_parameter, parameter_name


# Setting name -> SSM key
SETTINGS = {
    'AAD_EMAIL_REGEX': 'email-regex',
    'AAD_DENYLIST': 'denylist',
    'AAD_CLIENT_ID': 'client-id',
    'AAD_CLIENT_SECRET': 'client-secret',
    'AAD_TENANT_ID': 'tenant-id',
    'AAD_REDIRECT_URI': 'redirect-uri'
}

DEFAULTS = {
    'AAD_DENYLIST': '',
    'AAD_TENANT_ID': 'organizations',
    'AAD_REDIRECT_URI': ''
}

REQUIRED_SETTINGS = ('AAD_EMAIL_REGEX', 'AAD_CLIENT_ID', 'AAD_CLIENT_SECRET')


class ConfigurationError(ValueError):
    """Raised when a required AAD setting is missing."""


def get_setting(name: str) -> str:
    """
    Get a single AAD setting.

    Args:
        name: Setting name (e.g., 'AAD_EMAIL_REGEX')

    Returns:
        Setting value from the environment, SSM or the default
    """
    value = os.environ.get(name)
    if value is not None:
        return value

    value = get_parameter(parameter_name(SETTINGS[name]))
    if value:
        return value

    return DEFAULTS.get(name, '')


def get_aad_config() -> Dict[str, str]:
    """
    Load the AAD configuration used by the callback handler.

    Returns:
        Dict with AAD_EMAIL_REGEX, AAD_DENYLIST, AAD_CLIENT_ID,
        AAD_CLIENT_SECRET, AAD_TENANT_ID and AAD_REDIRECT_URI

    Raises:
        ConfigurationError: If a required setting is missing
    """
    config = {name: get_setting(name) for name in SETTINGS}

    missing = [name for name in REQUIRED_SETTINGS if not config[name]]
    if missing:
        raise ConfigurationError(f"Missing AAD configuration: {', '.join(missing)}")

    return config
