import base64
import uuid
from functools import lru_cache

from schemas import InboundRequest
from wake_proxy_service import WakeProxyService


@lru_cache(maxsize=1)
def get_service() -> WakeProxyService:
    """Build the service once per process from the function environment."""
    return WakeProxyService.from_env()


def parse_event(event: dict) -> InboundRequest:
    """Translate a function-URL (payload v2.0) event into an InboundRequest."""
    http = event.get("requestContext", {}).get("http", {})
    body = event.get("body")
    if body is not None:
        body = base64.b64decode(body) if event.get("isBase64Encoded") else body.encode("utf-8")
    return InboundRequest(
        method=http.get("method", "GET"),
        path=http.get("path") or event.get("rawPath") or "/",
        headers=event.get("headers") or {},
        query=event.get("queryStringParameters") or {},
        body=body,
    )


def request_id_for(event: dict, context) -> str:
    return (
        getattr(context, "aws_request_id", None)
        or event.get("requestContext", {}).get("requestId")
        or str(uuid.uuid4())
    )


def readiness_budget(service: WakeProxyService, context) -> float:
    """Polling budget: the configured timeout, shrunk to fit the invocation deadline."""
    settings = service.settings
    budget = settings.wake_timeout_s
    remaining_ms = getattr(context, "get_remaining_time_in_millis", None)
    if callable(remaining_ms):
        left = remaining_ms() / 1000.0 - settings.settle_delay_s - settings.deadline_margin_s
        budget = min(budget, max(left, 0.0))
    return budget


def handle(event, context):  # type: ignore[override]
    """
    Lambda entrypoint behind the function URL.
    Failures propagate so the platform reports the invocation as failed.
    """
    service = get_service()
    inbound = parse_event(event)
    response = service.handle(
        inbound,
        request_id=request_id_for(event, context),
        budget_s=readiness_budget(service, context),
    )
    return response.to_platform()
