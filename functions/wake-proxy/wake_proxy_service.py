from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Dict, Optional

from errors import WakeProxyError
from logging_helper import log_event, log_exception
from metrics_helper import compute_cost_unit, get_memory_limit_mb, stage_timer
from readiness_prober import needs_scale_up, scale_up
from request_forwarder import RequestForwarder
from scheduler_helper import ecs_client
from schemas import InboundRequest, OutboundResponse, WakeProxySettings
from task_poller import wait_for_running_task

COMPONENT = "wake-proxy"


class WakeState(str, Enum):
    START = "START"
    CHECK_DESIRED = "CHECK_DESIRED"
    SCALE_UP = "SCALE_UP"
    WAIT_FOR_READY = "WAIT_FOR_READY"
    SETTLE_DELAY = "SETTLE_DELAY"
    FORWARD = "FORWARD"
    RETURN = "RETURN"


class WakeProxyService:
    """
    Wakes a scaled-to-zero ECS service and replays one request against it.

    Every invocation runs the full sequence; the scheduler is the only source
    of truth and nothing observed here is kept for the next request.
    """

    def __init__(
        self,
        settings: WakeProxySettings,
        client=None,
        forwarder: Optional[RequestForwarder] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.descriptor = settings.descriptor
        self.client = client if client is not None else ecs_client(settings.region)
        self.forwarder = forwarder or RequestForwarder(
            settings.domain,
            scheme=settings.forward_scheme,
            timeout_s=settings.forward_timeout_s,
        )
        self.sleep = sleep
        self.clock = clock
        self.memory_limit_mb = get_memory_limit_mb()

    @classmethod
    def from_env(cls) -> "WakeProxyService":
        return cls(WakeProxySettings.from_env())

    def handle(
        self,
        inbound: InboundRequest,
        request_id: Optional[str] = None,
        budget_s: Optional[float] = None,
    ) -> OutboundResponse:
        """Run START → ... → RETURN once. Any failure is re-raised unchanged."""
        budget = self.settings.wake_timeout_s if budget_s is None else budget_s
        state = WakeState.START
        phases: Dict[str, int] = {}
        log_event(COMPONENT, "accepted", request_id=request_id, method=inbound.method, path=inbound.path, budget_s=budget)

        try:
            with stage_timer() as total:
                state = self._enter(WakeState.CHECK_DESIRED, request_id)
                with stage_timer() as elapsed:
                    scaled_up = needs_scale_up(self.client, self.descriptor, request_id=request_id)
                    if scaled_up:
                        state = self._enter(WakeState.SCALE_UP, request_id)
                        scale_up(self.client, self.descriptor, request_id=request_id)
                phases["wake_ms"] = elapsed()

                state = self._enter(WakeState.WAIT_FOR_READY, request_id)
                with stage_timer() as elapsed:
                    outcome = wait_for_running_task(
                        self.client,
                        self.descriptor,
                        budget_s=budget,
                        interval_s=self.settings.poll_interval_s,
                        request_id=request_id,
                        sleep=self.sleep,
                        clock=self.clock,
                    )
                phases["wait_ms"] = elapsed()

                state = self._enter(WakeState.SETTLE_DELAY, request_id)
                self.sleep(self.settings.settle_delay_s)

                state = self._enter(WakeState.FORWARD, request_id)
                with stage_timer() as elapsed:
                    response = self.forwarder.forward(inbound, request_id=request_id)
                phases["forward_ms"] = elapsed()

                self._enter(WakeState.RETURN, request_id)
        except WakeProxyError as exc:
            log_exception(COMPONENT, request_id, exc, state=state.value, **phases)
            raise

        duration_ms = total()
        log_event(
            COMPONENT,
            "metrics",
            request_id=request_id,
            duration_ms=duration_ms,
            scaled_up=scaled_up,
            poll_rounds=outcome.rounds,
            task_id=outcome.task.task_id,
            status_code=response.status_code,
            memory_limit_mb=self.memory_limit_mb,
            cost_unit=compute_cost_unit(duration_ms, self.memory_limit_mb),
            **phases,
        )
        return response

    @staticmethod
    def _enter(state: WakeState, request_id: Optional[str]) -> WakeState:
        log_event(COMPONENT, "state", request_id=request_id, state=state.value)
        return state
