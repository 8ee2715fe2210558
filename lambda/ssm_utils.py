"""
AWS Systems Manager Parameter Store utilities.
Loads AAD configuration and the OAuth client secret from SSM.
"""
import os
import boto3
from botocore.exceptions import ClientError
from functools import lru_cache


DEFAULT_PREFIX = '/aad-verification'

ssm_client = boto3.client('ssm', region_name=os.environ.get('AWS_REGION', 'us-east-1'))


def parameter_name(key: str, prefix: str = None) -> str:
    """
    Build a full parameter name from a key.

    Args:
        key: Parameter key (e.g., 'client-secret')
        prefix: Parameter path prefix, defaults to AAD_SSM_PREFIX

    Returns:
        Parameter name (e.g., '/aad-verification/client-secret')
    """
    if prefix is None:
        prefix = os.environ.get('AAD_SSM_PREFIX', DEFAULT_PREFIX)
    return f"{prefix.rstrip('/')}/{key.lstrip('/')}"


@lru_cache(maxsize=32)
def get_parameter(name: str) -> str:
    """
    Get SSM parameter with caching.

    Args:
        name: Parameter name (e.g., '/aad-verification/email-regex')

    Returns:
        Parameter value, or "" if it is missing or unreadable
    """
    try:
        response = ssm_client.get_parameter(Name=name, WithDecryption=True)
        return response['Parameter']['Value']
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code')
        if error_code == 'ParameterNotFound':
            print(f"Parameter {name} not found")
        else:
            print(f"Error getting parameter {name}: {error_code}")
        return ""
    except Exception as e:
        print(f"Error getting parameter {name}: {e}")
        return ""
