"""Shared test fixtures."""

import os

import boto3
import pytest
from moto import mock_aws


@pytest.fixture(autouse=True)
def default_project_env(monkeypatch):
    """Provide deterministic default env vars for tests."""
    defaults = {
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": "us-east-1",
    }
    for key, value in defaults.items():
        monkeypatch.setenv(key, value)
    for key in [
        "AWS_ENDPOINT_URL",
        "AWS_ENDPOINT_URL_CLOUDWATCH",
        "AWS_PROFILE",
        "MP_AWS_BILLING_LABEL_PREFIX",
        "MP_AWS_BILLING_LOG_LEVEL",
        "MACKEREL_AGENT_PLUGIN_META",
    ]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def cloudwatch_client(aws_credentials):
    """Create a mocked CloudWatch client."""
    with mock_aws():
        yield boto3.client("cloudwatch", region_name="us-east-1")


class StubCloudWatch:
    """Answers get_metric_statistics with canned datapoints (or an error)."""

    def __init__(self, datapoints=None, *, error=None):
        self._datapoints = list(datapoints or [])
        self._error = error
        self.calls = []

    def get_metric_statistics(
        self,
        *,
        Namespace,
        MetricName,
        Dimensions,
        StartTime,
        EndTime,
        Period,
        Statistics,
    ):
        self.calls.append({
            "Namespace": Namespace,
            "MetricName": MetricName,
            "Dimensions": Dimensions,
            "StartTime": StartTime,
            "EndTime": EndTime,
            "Period": Period,
            "Statistics": Statistics,
        })
        if self._error is not None:
            raise self._error
        return {"Label": MetricName, "Datapoints": list(self._datapoints)}


@pytest.fixture
def stub_cloudwatch():
    """Factory for stub CloudWatch clients."""
    return StubCloudWatch
