"""
Utilities for talking to the ECS control plane.

Components should use these helpers instead of calling boto3 directly so that
scheduler failures are always surfaced as UpstreamQueryError.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator, List, Sequence

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from errors import UpstreamQueryError
from schemas import ServiceDescriptor, TaskInstance

# DescribeTasks accepts at most this many task ids per call.
DESCRIBE_TASKS_BATCH = 100


@lru_cache(maxsize=4)
def ecs_client(region: str):
    """
    Lazily instantiate a boto3 ECS client for the given region.
    Retries are left to botocore's standard mode; this code never retries on top.
    """
    session = boto3.session.Session()
    return session.client(
        "ecs",
        region_name=region,
        config=Config(retries={"mode": "standard"}),
    )


def _describe_error(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        return f"{error.get('Code', 'Unknown')}: {error.get('Message', str(exc))}"
    return str(exc)


def get_desired_count(client, descriptor: ServiceDescriptor) -> int:
    """Return the service's current desired count."""
    try:
        response = client.describe_services(
            cluster=descriptor.cluster_id,
            services=[descriptor.service_id],
        )
    except (ClientError, BotoCoreError) as exc:
        raise UpstreamQueryError("DescribeServices", _describe_error(exc)) from exc

    services = response.get("services", [])
    if not services:
        reasons = ", ".join(f.get("reason", "unknown") for f in response.get("failures", [])) or "not found"
        raise UpstreamQueryError("DescribeServices", f"service {descriptor.service_id}: {reasons}")
    return int(services[0].get("desiredCount", 0))


def set_desired_count(client, descriptor: ServiceDescriptor, desired_count: int) -> None:
    try:
        client.update_service(
            cluster=descriptor.cluster_id,
            service=descriptor.service_id,
            desiredCount=desired_count,
        )
    except (ClientError, BotoCoreError) as exc:
        raise UpstreamQueryError("UpdateService", _describe_error(exc)) from exc


def list_task_ids(client, descriptor: ServiceDescriptor) -> List[str]:
    """Return every task id currently listed for the service, following pagination."""
    task_ids: List[str] = []
    kwargs = {"cluster": descriptor.cluster_id, "serviceName": descriptor.service_id}
    try:
        while True:
            page = client.list_tasks(**kwargs)
            task_ids.extend(page.get("taskArns", []))
            token = page.get("nextToken")
            if not token:
                return task_ids
            kwargs["nextToken"] = token
    except (ClientError, BotoCoreError) as exc:
        raise UpstreamQueryError("ListTasks", _describe_error(exc)) from exc


def _batches(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def describe_tasks(client, descriptor: ServiceDescriptor, task_ids: Sequence[str]) -> Iterator[TaskInstance]:
    """Yield fresh status for each task id, one DescribeTasks call per batch."""
    for batch in _batches(task_ids, DESCRIBE_TASKS_BATCH):
        try:
            response = client.describe_tasks(cluster=descriptor.cluster_id, tasks=list(batch))
        except (ClientError, BotoCoreError) as exc:
            raise UpstreamQueryError("DescribeTasks", _describe_error(exc)) from exc
        for task in response.get("tasks", []):
            yield TaskInstance(
                task_id=task.get("taskArn", ""),
                last_status=task.get("lastStatus"),
                desired_status=task.get("desiredStatus"),
            )
