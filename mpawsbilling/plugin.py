"""AWS billing plugin: the two operations the reporting harness calls."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Literal

from mpawsbilling.config import DEFAULT_LABEL_PREFIX, ConnectionProfile
from mpawsbilling.helpers.aws_client import get_cloudwatch_client
from mpawsbilling.metrics.cloudwatch import (
    BILLING_GROUPS,
    MetricGroup,
    fetch_latest_datapoint,
    merge_stats,
)

GraphUnit = Literal["float", "integer", "percentage", "bytes", "bytes/sec", "iops"]

GRAPH_KEY = "requests"


@dataclass(frozen=True)
class GraphMetric:
    name: str
    label: str
    stacked: bool = False


@dataclass(frozen=True)
class Graph:
    label: str
    unit: GraphUnit
    metrics: tuple[GraphMetric, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "unit": self.unit,
            "metrics": [asdict(m) for m in self.metrics],
        }


class AwsBillingPlugin:
    def __init__(
        self,
        profile: ConnectionProfile,
        *,
        cloudwatch_client=None,
        groups: tuple[MetricGroup, ...] = BILLING_GROUPS,
    ):
        self.profile = profile
        self.cloudwatch = cloudwatch_client
        self.groups = groups

    def prepare(self) -> None:
        """Create the CloudWatch client unless one was injected.

        Raises ClientInitializationError.
        """
        if self.cloudwatch is None:
            self.cloudwatch = get_cloudwatch_client(self.profile)

    def metrics_label_prefix(self) -> str:
        return self.profile.label_prefix or DEFAULT_LABEL_PREFIX

    def fetch_metrics(self, *, now: datetime | None = None) -> dict[str, float]:
        """Fetch the latest value of every configured metric.

        Groups without data contribute no keys. The first FetchError aborts
        the whole call; partial results are never returned.
        """
        if self.cloudwatch is None:
            raise RuntimeError("prepare() must be called before fetch_metrics()")

        stats: dict[str, float] = {}
        for group in self.groups:
            dp = fetch_latest_datapoint(self.cloudwatch, group, now=now)
            if dp is not None:
                stats = merge_stats(stats, dp, group)
        return stats

    def graph_definition(self) -> dict[str, Graph]:
        return {
            GRAPH_KEY: Graph(
                label=self.metrics_label_prefix(),
                unit="float",
                metrics=(GraphMetric(name="EstimatedCharges", label="EstimatedCharges", stacked=True),),
            ),
        }
