"""Shared test helpers: import paths, a stubbed ECS client and a fake clock."""

import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

for relative in ("base-image/common", "functions/wake-proxy", "build/wake-proxy", "scripts"):
    path = os.path.join(ROOT, relative)
    if path not in sys.path:
        sys.path.append(path)

import boto3  # noqa: E402
from botocore.stub import Stubber  # noqa: E402

from schemas import ServiceDescriptor, WakeProxySettings  # noqa: E402

CLUSTER = "scale-to-zero-cluster"
SERVICE = "web"
DOMAIN = "app.example.com"
TASK_ARN = "arn:aws:ecs:us-east-2:123456789012:task/scale-to-zero-cluster/0a1b2c3d"

DESCRIPTOR = ServiceDescriptor(cluster_id=CLUSTER, service_id=SERVICE)


def make_settings(**overrides) -> WakeProxySettings:
    values = {
        "region": "us-east-2",
        "cluster_name": CLUSTER,
        "service_name": SERVICE,
        "domain": DOMAIN,
    }
    values.update(overrides)
    return WakeProxySettings(**values)


def make_stubbed_client():
    client = boto3.client(
        "ecs",
        region_name="us-east-2",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    return client, Stubber(client)


def stub_describe_services(stubber: Stubber, desired_count: int) -> None:
    stubber.add_response(
        "describe_services",
        {"services": [{"serviceName": SERVICE, "desiredCount": desired_count}], "failures": []},
        {"cluster": CLUSTER, "services": [SERVICE]},
    )


def stub_update_service(stubber: Stubber, desired_count: int = 1) -> None:
    stubber.add_response(
        "update_service",
        {"service": {"serviceName": SERVICE, "desiredCount": desired_count}},
        {"cluster": CLUSTER, "service": SERVICE, "desiredCount": desired_count},
    )


def stub_list_tasks(stubber: Stubber, task_arns) -> None:
    stubber.add_response(
        "list_tasks",
        {"taskArns": list(task_arns)},
        {"cluster": CLUSTER, "serviceName": SERVICE},
    )


def stub_describe_tasks(stubber: Stubber, statuses) -> None:
    """`statuses` is a list of (task_arn, last_status, desired_status)."""
    stubber.add_response(
        "describe_tasks",
        {
            "tasks": [
                {"taskArn": arn, "lastStatus": last, "desiredStatus": desired}
                for arn, last, desired in statuses
            ],
            "failures": [],
        },
        {"cluster": CLUSTER, "tasks": [arn for arn, _, _ in statuses]},
    )


class FakeClock:
    """Deterministic clock whose sleep() advances time and records each call."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
