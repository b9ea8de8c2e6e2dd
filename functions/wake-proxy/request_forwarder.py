from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import httpx

from errors import ForwardError
from logging_helper import log_event
from schemas import InboundRequest, OutboundResponse

COMPONENT = "request-forwarder"

# Added by httpx from the request itself rather than from client defaults.
TRANSPORT_HEADERS = {"host", "content-length"}


def encode_headers(headers: Dict[str, str]) -> List[Tuple[bytes, bytes]]:
    """UTF-8 encode header pairs; httpx would otherwise reject non-ASCII values."""
    return [(key.encode("utf-8"), value.encode("utf-8")) for key, value in headers.items()]


def strip_client_defaults(request: httpx.Request, inbound_headers: Dict[str, str]) -> None:
    """Drop headers the client added on its own (user-agent, accept-encoding, ...)."""
    keep = {key.lower() for key in inbound_headers} | TRANSPORT_HEADERS
    for key in list(request.headers.keys()):
        if key not in keep:
            del request.headers[key]


class RequestForwarder:
    """
    Replays one inbound request against the woken service's stable DNS name.

    The whole response is buffered; nothing is streamed and no connection is
    kept between invocations.
    """

    def __init__(
        self,
        domain: str,
        scheme: str = "https",
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = f"{scheme}://{domain}"
        self.timeout_s = timeout_s
        self.transport = transport

    def forward(self, inbound: InboundRequest, request_id: Optional[str] = None) -> OutboundResponse:
        url = f"{self.base_url}{inbound.path}"
        log_event(
            COMPONENT,
            "forward",
            request_id=request_id,
            method=inbound.method,
            url=url,
            body_bytes=len(inbound.body) if inbound.body else 0,
        )
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self.transport, follow_redirects=False) as client:
                request = client.build_request(
                    inbound.method,
                    url,
                    params=inbound.query or None,
                    headers=encode_headers(inbound.headers),
                    content=inbound.body if inbound.body else None,
                )
                strip_client_defaults(request, inbound.headers)
                response = client.send(request, stream=True)
                try:
                    # Raw bytes keep the body consistent with the relayed content-encoding header.
                    body = b"".join(response.iter_raw())
                finally:
                    response.close()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ForwardError(url, str(exc) or type(exc).__name__, exc) from exc

        log_event(COMPONENT, "response", request_id=request_id, status_code=response.status_code, body_bytes=len(body))
        return OutboundResponse.from_raw(response.status_code, response.headers.multi_items(), body)
