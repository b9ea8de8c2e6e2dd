from __future__ import annotations

from typing import Optional

from logging_helper import log_event
from scheduler_helper import get_desired_count, set_desired_count
from schemas import WAKE_TARGET, ServiceDescriptor

COMPONENT = "readiness-prober"


def needs_scale_up(client, descriptor: ServiceDescriptor, request_id: Optional[str] = None) -> bool:
    """Read the desired count; True when it differs from WAKE_TARGET."""
    current = get_desired_count(client, descriptor)
    if current == WAKE_TARGET:
        log_event(COMPONENT, "already_desired", request_id=request_id, desired_count=current)
        return False
    log_event(COMPONENT, "below_target", request_id=request_id, desired_count=current, target=WAKE_TARGET)
    return True


def scale_up(client, descriptor: ServiceDescriptor, request_id: Optional[str] = None) -> None:
    log_event(COMPONENT, "scale_up", request_id=request_id, target=WAKE_TARGET)
    set_desired_count(client, descriptor, WAKE_TARGET)


def ensure_desired_count(client, descriptor: ServiceDescriptor, request_id: Optional[str] = None) -> bool:
    """
    Make sure the service is asked to run WAKE_TARGET replicas.

    Returns True when an UpdateService call was issued, False when the desired
    count already matched and nothing was written. Concurrent callers converge
    on the same target, so redundant calls are harmless.
    """
    if not needs_scale_up(client, descriptor, request_id=request_id):
        return False
    scale_up(client, descriptor, request_id=request_id)
    return True
