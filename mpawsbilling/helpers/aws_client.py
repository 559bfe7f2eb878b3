"""Boto3 client factory for AWS and LocalStack."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError

from mpawsbilling.config import DEFAULT_REGION, ConnectionProfile, has_static_credentials

logger = logging.getLogger(__name__)

_LOCAL_DUMMY_CREDENTIAL = "test"


class ClientInitializationError(RuntimeError):
    """Raised when a boto3 session or client cannot be established."""


def _is_local_endpoint(endpoint: str | None) -> bool:
    if not endpoint:
        return False
    try:
        host = (urlparse(endpoint).hostname or "").lower()
    except ValueError:
        return False
    if not host:
        return False
    return host in {"localhost", "127.0.0.1", "::1", "localstack"} or "localstack" in host


def _session(profile: ConnectionProfile) -> boto3.Session:
    if has_static_credentials(profile):
        return boto3.Session(
            aws_access_key_id=profile.access_key_id,
            aws_secret_access_key=profile.secret_access_key,
        )
    return boto3.Session()


def get_client(service: str, profile: ConnectionProfile):
    """Create a boto3 client for the given service.

    Static credentials are used only when both halves of the key pair are set;
    otherwise boto3's own discovery chain applies, including endpoint
    overrides from AWS_ENDPOINT_URL / AWS_ENDPOINT_URL_<SERVICE>. The region
    falls back to whatever boto3 discovers, then to ``DEFAULT_REGION``.
    """
    try:
        session = _session(profile)
        region = profile.region or session.region_name or DEFAULT_REGION
        client = session.client(service, region_name=region)
        # Emulators accept any key pair, but signing still needs one.
        if session.get_credentials() is None and _is_local_endpoint(client.meta.endpoint_url):
            client = session.client(
                service,
                region_name=region,
                aws_access_key_id=_LOCAL_DUMMY_CREDENTIAL,
                aws_secret_access_key=_LOCAL_DUMMY_CREDENTIAL,
            )
    except (BotoCoreError, ValueError) as e:
        raise ClientInitializationError(f"Could not create {service} client: {e}") from e

    logger.debug(
        "Created %s client (region=%s, endpoint=%s, static_credentials=%s)",
        service,
        region,
        client.meta.endpoint_url,
        has_static_credentials(profile),
    )
    return client


def get_cloudwatch_client(profile: ConnectionProfile):
    return get_client("cloudwatch", profile)
