"""Runtime configuration helpers for the billing plugin."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

# CloudWatch only publishes billing metrics in us-east-1.
DEFAULT_REGION = "us-east-1"
DEFAULT_LABEL_PREFIX = "AWS/Billing"

LABEL_PREFIX_ENV = "MP_AWS_BILLING_LABEL_PREFIX"
LOG_LEVEL_ENV = "MP_AWS_BILLING_LOG_LEVEL"


@dataclass(frozen=True)
class ConnectionProfile:
    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    label_prefix: str | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def resolve_profile(
    *,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
    region: str | None = None,
    label_prefix: str | None = None,
) -> ConnectionProfile:
    """Build the connection profile from flag values (empty means unset)."""
    if label_prefix is None:
        label_prefix = os.environ.get(LABEL_PREFIX_ENV)
    return ConnectionProfile(
        region=_clean(region),
        access_key_id=_clean(access_key_id),
        secret_access_key=_clean(secret_access_key),
        label_prefix=_clean(label_prefix),
    )


def has_static_credentials(profile: ConnectionProfile) -> bool:
    return bool(profile.access_key_id and profile.secret_access_key)


def get_log_level() -> int:
    """Get the log level name from the environment (default WARNING)."""
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not raw:
        return logging.WARNING
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise RuntimeError(f"Invalid {LOG_LEVEL_ENV}: {raw}")
    return level
