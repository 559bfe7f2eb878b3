#!/usr/bin/env python3
"""Report AWS estimated charges (CloudWatch AWS/Billing) to mackerel-agent.

Credentials and region fall back to the usual boto3 discovery chain when the
flags are omitted. Set MP_AWS_BILLING_LABEL_PREFIX to relabel the graph.

Usage:
  mackerel-plugin-aws-billing --region us-east-1
  MACKEREL_AGENT_PLUGIN_META=1 mackerel-plugin-aws-billing
"""

from __future__ import annotations

import argparse
import logging
import sys

from mpawsbilling.config import get_log_level, resolve_profile
from mpawsbilling.harness import run
from mpawsbilling.helpers.aws_client import ClientInitializationError
from mpawsbilling.metrics.cloudwatch import FetchError
from mpawsbilling.plugin import AwsBillingPlugin

PROG = "mackerel-plugin-aws-billing"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--access-key-id", default="", help="AWS Access Key ID")
    parser.add_argument("--secret-access-key", default="", help="AWS Secret Access Key")
    parser.add_argument("--region", default="", help="AWS Region")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        level = get_log_level()
    except RuntimeError as e:
        raise SystemExit(f"{PROG}: {e}") from e
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    profile = resolve_profile(
        access_key_id=args.access_key_id,
        secret_access_key=args.secret_access_key,
        region=args.region,
    )
    plugin = AwsBillingPlugin(profile)
    try:
        plugin.prepare()
    except ClientInitializationError as e:
        raise SystemExit(f"{PROG}: {e}") from e

    try:
        run(plugin)
    except FetchError as e:
        raise SystemExit(f"{PROG}: fetch failed: {e}") from e


if __name__ == "__main__":
    main()
