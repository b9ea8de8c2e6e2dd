"""
Structured logging utilities for the wake-proxy function.

All logs are emitted as JSON lines to stdout so CloudWatch Logs Insights can query them.
"""

from __future__ import annotations

import json
import os
import socket
import sys
import time
from typing import Any, Dict, Optional

HOSTNAME = socket.gethostname()
FUNCTION_NAME = os.getenv("AWS_LAMBDA_FUNCTION_NAME", "wake-proxy")


def log_event(component: str, event: str, request_id: Optional[str] = None, **fields: Any) -> None:
    """
    Emit a structured log line.

    Example:
        log_event("task-poller", "round", request_id="abc", tasks=2, running=False)
    """
    record: Dict[str, Any] = {
        "timestamp": time.time(),
        "component": component,
        "event": event,
        "request_id": request_id,
        "function": FUNCTION_NAME,
        "host": HOSTNAME,
    }
    record.update(fields)
    sys.stdout.write(json.dumps(record, default=str) + "\n")
    sys.stdout.flush()


def log_exception(component: str, request_id: Optional[str], exc: Exception, **fields: Any) -> None:
    """Convenience helper to log exceptions with their type and message."""
    log_event(component, "error", request_id=request_id, error_type=type(exc).__name__, error=str(exc), **fields)
