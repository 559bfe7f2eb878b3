"""Mackerel agent plugin output.

mackerel-agent runs the plugin on a schedule and reads stdout:
  - with MACKEREL_AGENT_PLUGIN_META set, a `# mackerel-agent-plugin` header
    followed by the JSON graph definitions;
  - otherwise one `name<TAB>value<TAB>epoch` line per metric.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TextIO

from mpawsbilling.metrics.cloudwatch import FetchError
from mpawsbilling.plugin import AwsBillingPlugin, Graph

logger = logging.getLogger(__name__)

META_ENV = "MACKEREL_AGENT_PLUGIN_META"
META_HEADER = "# mackerel-agent-plugin"


def format_values(
    stats: Mapping[str, float],
    graphs: Mapping[str, Graph],
    *,
    now: datetime,
) -> list[str]:
    epoch = int(now.timestamp())
    lines: list[str] = []
    for key, graph in graphs.items():
        for metric in graph.metrics:
            if metric.name not in stats:
                continue
            lines.append(f"{key}.{metric.name}\t{stats[metric.name]:f}\t{epoch}")
    return lines


def format_definitions(graphs: Mapping[str, Graph]) -> str:
    payload = {
        "graphs": {
            (key if key.startswith("custom.") else f"custom.{key}"): graph.to_dict()
            for key, graph in graphs.items()
        }
    }
    return f"{META_HEADER}\n{json.dumps(payload)}"


def run(
    plugin: AwsBillingPlugin,
    *,
    stream: TextIO | None = None,
    environ: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> None:
    """Print graph definitions or current values, as mackerel-agent asks."""
    out = stream or sys.stdout
    env = os.environ if environ is None else environ
    graphs = plugin.graph_definition()

    if env.get(META_ENV, ""):
        print(format_definitions(graphs), file=out)
        return

    now = now or datetime.now(timezone.utc)
    try:
        stats = plugin.fetch_metrics(now=now)
    except FetchError as e:
        logger.error(f"Fetching metrics failed: {e}")
        raise

    for line in format_values(stats, graphs, now=now):
        print(line, file=out)
