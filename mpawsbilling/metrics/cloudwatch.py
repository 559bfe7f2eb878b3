"""CloudWatch billing metric lookups.

Each `MetricGroup` names one remote CloudWatch metric and the local output
names derived from it. A group is queried over the trailing 24 hours at a
daily period and only the most recent data point is kept.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

CloudWatchStat = Literal["Average", "Sum", "Minimum", "Maximum", "SampleCount"]

KNOWN_STATS: frozenset[str] = frozenset({"Average", "Sum", "Minimum", "Maximum", "SampleCount"})

BILLING_NAMESPACE = "AWS/Billing"
PERIOD_SECONDS = 86400
WINDOW = timedelta(hours=24)

# Older than any timestamp CloudWatch can return.
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class FetchError(RuntimeError):
    """Raised when a CloudWatch query fails (transport, auth, throttling)."""

    def __init__(self, metric_name: str, message: str):
        super().__init__(f"{metric_name}: {message}")
        self.metric_name = metric_name


@dataclass(frozen=True)
class MetricSpec:
    output_name: str
    stat: CloudWatchStat


@dataclass(frozen=True)
class MetricGroup:
    remote_metric_name: str
    members: tuple[MetricSpec, ...]
    namespace: str = BILLING_NAMESPACE
    # Billing metrics are published per currency.
    dimensions: tuple[tuple[str, str], ...] = (("Currency", "USD"),)


BILLING_GROUPS: tuple[MetricGroup, ...] = (
    MetricGroup("EstimatedCharges", (MetricSpec("EstimatedCharges", "Maximum"),)),
)


def _ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _utc_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return _ensure_utc(now)


def group_statistics(group: MetricGroup) -> list[str]:
    """Statistics requested for a group, de-duplicated in declaration order."""
    stats: list[str] = []
    for member in group.members:
        if member.stat not in stats:
            stats.append(member.stat)
    return stats


def build_query(group: MetricGroup, *, now: datetime | None = None) -> dict[str, Any]:
    """Build `get_metric_statistics` kwargs for one group."""
    end_time = _utc_now(now)
    return {
        "Namespace": group.namespace,
        "MetricName": group.remote_metric_name,
        "Dimensions": [{"Name": name, "Value": value} for name, value in group.dimensions],
        "StartTime": end_time - WINDOW,
        "EndTime": end_time,
        "Period": PERIOD_SECONDS,
        "Statistics": group_statistics(group),
    }


def latest_datapoint(datapoints: Iterable[dict[str, Any]]) -> dict[str, Any] | None:
    """Return the point with the newest timestamp, or None.

    A point replaces the current pick unless it is strictly older, so on a
    timestamp tie the point seen last wins.
    """
    latest = _OLDEST
    picked: dict[str, Any] | None = None
    for dp in datapoints:
        ts = dp.get("Timestamp")
        if not isinstance(ts, datetime):
            continue
        ts_utc = _ensure_utc(ts)
        if ts_utc < latest:
            continue
        latest = ts_utc
        picked = dp
    return picked


def fetch_latest_datapoint(
    cloudwatch_client,
    group: MetricGroup,
    *,
    now: datetime | None = None,
) -> dict[str, Any] | None:
    """Query one group and return its most recent data point.

    Returns None when CloudWatch has nothing for the window, which is normal
    before the day's billing estimate has been posted.
    """
    query = build_query(group, now=now)
    try:
        resp = cloudwatch_client.get_metric_statistics(**query)
    except (ClientError, BotoCoreError) as e:
        raise FetchError(group.remote_metric_name, str(e)) from e

    datapoints = resp.get("Datapoints", [])
    if not datapoints:
        logger.info("No datapoints for %s/%s", group.namespace, group.remote_metric_name)
        return None
    return latest_datapoint(datapoints)


def merge_stats(
    stats: dict[str, float],
    datapoint: dict[str, Any],
    group: MetricGroup,
) -> dict[str, float]:
    """Copy the group's statistics from `datapoint` into `stats`."""
    for member in group.members:
        if member.stat not in KNOWN_STATS:
            continue
        raw = datapoint.get(member.stat)
        if raw is None:
            logger.debug("Datapoint for %s has no %s", group.remote_metric_name, member.stat)
            continue
        stats[member.output_name] = float(raw)
    return stats
