"""Shared aioboto3 session and client configuration."""

import aioboto3
from botocore.config import Config

from src.utils.settings.aws import AWSSettings


def create_session(settings: AWSSettings) -> aioboto3.Session:
    """Build a session from explicit credentials, or the default chain when unset."""
    secret = settings.AWS_SECRET_ACCESS_KEY_ID.get_secret_value()
    if settings.AWS_ACCESS_KEY_ID and secret:
        return aioboto3.Session(
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=secret,
            region_name=settings.AWS_REGION,
        )
    return aioboto3.Session(region_name=settings.AWS_REGION)


def client_config(timeout_seconds: float) -> Config:
    # Single attempt, callers decide on retries
    return Config(
        connect_timeout=timeout_seconds,
        read_timeout=timeout_seconds,
        retries={"max_attempts": 1, "mode": "standard"},
    )
