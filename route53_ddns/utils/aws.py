"""Shared boto3 client configuration."""

import logging
from typing import Any

from route53_ddns.config import settings

logger = logging.getLogger(__name__)


def get_aws_config(endpoint_url: str | None = None) -> dict[str, Any]:
    """
    Build aioboto3 client/resource parameters based on environment.

    For AWS Lambda with IAM roles, returns minimal config (region only).
    For LocalStack or moto, includes endpoint_url and explicit credentials.

    Args:
        endpoint_url: Optional service endpoint override

    Returns:
        Dictionary of boto3 client parameters
    """
    config: dict[str, Any] = {"region_name": settings.aws_region}

    if endpoint_url:
        config["endpoint_url"] = endpoint_url

    # Lambda provides AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY and
    # AWS_SESSION_TOKEN; all three must be passed for temporary credentials
    if settings.aws_access_key_id:
        config["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        config["aws_secret_access_key"] = settings.aws_secret_access_key
    if settings.aws_session_token:
        config["aws_session_token"] = settings.aws_session_token

    logger.debug(
        "AWS client config built",
        extra={
            "context": {
                "config_keys": sorted(k for k in config if not k.startswith("aws_")),
                "explicit_credentials": "aws_access_key_id" in config,
            }
        },
    )
    return config


def get_dynamodb_config() -> dict[str, Any]:
    """Client parameters for DynamoDB."""
    return get_aws_config(settings.dynamodb_endpoint_url)


def get_route53_config() -> dict[str, Any]:
    """Client parameters for Route 53."""
    return get_aws_config(settings.route53_endpoint_url)
