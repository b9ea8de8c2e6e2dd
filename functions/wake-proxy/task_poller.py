from __future__ import annotations

import time
from typing import Callable, Optional

from errors import ReadinessTimeout
from logging_helper import log_event
from scheduler_helper import describe_tasks, list_task_ids
from schemas import PollOutcome, ServiceDescriptor

COMPONENT = "task-poller"
DEFAULT_INTERVAL_S = 0.1


def wait_for_running_task(
    client,
    descriptor: ServiceDescriptor,
    budget_s: float,
    interval_s: float = DEFAULT_INTERVAL_S,
    request_id: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> PollOutcome:
    """
    Poll the scheduler until any task of the service is RUNNING/RUNNING.

    The first running task wins; other tasks may still be starting. Raises
    ReadinessTimeout once `budget_s` of wall-clock time has elapsed without
    success. Only reads are issued.
    """
    started = clock()
    rounds = 0
    while True:
        rounds += 1
        task_ids = list_task_ids(client, descriptor)
        if task_ids:
            for task in describe_tasks(client, descriptor, task_ids):
                if task.is_running:
                    log_event(COMPONENT, "running", request_id=request_id, task_id=task.task_id, rounds=rounds)
                    return PollOutcome(task=task, rounds=rounds)
        log_event(COMPONENT, "not_ready", request_id=request_id, round=rounds, tasks=len(task_ids))

        remaining = budget_s - (clock() - started)
        if remaining <= 0:
            raise ReadinessTimeout(budget_s, rounds)
        sleep(min(interval_s, remaining))
