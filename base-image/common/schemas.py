"""Pydantic models shared across the wake-proxy function."""

from __future__ import annotations

import base64
import os
from typing import Any, Dict, Iterable, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# The only desired count this function ever writes.
WAKE_TARGET = 1

RUNNING = "RUNNING"


def flatten_pairs(value: Union[Mapping[str, str], Iterable[Tuple[str, str]], None]) -> Dict[str, str]:
    """Collapse a mapping or a sequence of pairs to one value per key; the last pair wins."""
    if value is None:
        return {}
    items = value.items() if isinstance(value, Mapping) else value
    flattened: Dict[str, str] = {}
    for key, item in items:
        flattened[str(key)] = str(item)
    return flattened


class ServiceDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    cluster_id: str
    service_id: str


class TaskInstance(BaseModel):
    task_id: str
    last_status: Optional[str] = None
    desired_status: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.last_status == RUNNING and self.desired_status == RUNNING


class PollOutcome(BaseModel):
    task: TaskInstance
    rounds: int


class InboundRequest(BaseModel):
    method: str
    path: str = "/"
    headers: Dict[str, str] = Field(default_factory=dict)
    query: Dict[str, str] = Field(default_factory=dict)
    body: Optional[bytes] = None

    @field_validator("headers", "query", mode="before")
    @classmethod
    def _one_value_per_key(cls, value: Any) -> Dict[str, str]:
        return flatten_pairs(value)

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()


class OutboundResponse(BaseModel):
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""
    body_encoding: Literal["literal", "base64"] = "base64"

    @classmethod
    def from_raw(
        cls,
        status_code: int,
        headers: Union[Mapping[str, str], Iterable[Tuple[str, str]]],
        body: bytes,
    ) -> "OutboundResponse":
        """Capture a raw response; the body always leaves base64-encoded."""
        return cls(
            status_code=status_code,
            headers=flatten_pairs(headers),
            body=base64.b64encode(body).decode("ascii"),
            body_encoding="base64",
        )

    def body_bytes(self) -> bytes:
        if self.body_encoding == "base64":
            return base64.b64decode(self.body)
        return self.body.encode("utf-8")

    def to_platform(self) -> Dict[str, Any]:
        """Render the function-URL response shape."""
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
            "isBase64Encoded": self.body_encoding == "base64",
        }


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"Environment variable {name} is required")
    return value


class WakeProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    region: str
    cluster_name: str
    service_name: str
    domain: str
    forward_scheme: Literal["http", "https"] = "https"
    poll_interval_s: float = Field(default=0.1, gt=0)
    settle_delay_s: float = Field(default=1.0, ge=0)
    wake_timeout_s: float = Field(default=170.0, gt=0)
    deadline_margin_s: float = Field(default=5.0, ge=0)
    forward_timeout_s: Optional[float] = None

    @classmethod
    def from_env(cls) -> "WakeProxySettings":
        forward_timeout = os.getenv("FORWARD_TIMEOUT_SECONDS")
        return cls(
            region=_required_env("REGION"),
            cluster_name=_required_env("CLUSTER_NAME"),
            service_name=_required_env("SERVICE_NAME"),
            domain=_required_env("DOMAIN"),
            forward_scheme=os.getenv("FORWARD_SCHEME", "https").lower(),
            poll_interval_s=int(os.getenv("POLL_INTERVAL_MS", "100")) / 1000.0,
            settle_delay_s=int(os.getenv("SETTLE_DELAY_MS", "1000")) / 1000.0,
            wake_timeout_s=float(os.getenv("WAKE_TIMEOUT_SECONDS", "170")),
            deadline_margin_s=float(os.getenv("DEADLINE_MARGIN_SECONDS", "5")),
            forward_timeout_s=float(forward_timeout) if forward_timeout else None,
        )

    @property
    def descriptor(self) -> ServiceDescriptor:
        return ServiceDescriptor(cluster_id=self.cluster_name, service_id=self.service_name)
