"""Forwarding a request to another origin."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

import requests
from werkzeug.wrappers import Request, Response

_HOP_BY_HOP = {
    "connection", "keep-alive", "proxy-authenticate", "proxy-authorization",
    "te", "trailer", "transfer-encoding", "upgrade",
}
_DROPPED_REQUEST = _HOP_BY_HOP | {"cookie", "authorization", "host", "content-length"}
_DROPPED_RESPONSE = _HOP_BY_HOP | {"content-encoding", "content-length"}


@dataclass
class ProxyRequest:
    method: str
    url: str
    host: str
    headers: dict[str, str]
    body: bytes


def direct(request: Request, target: str) -> ProxyRequest:
    """Describe the upstream request; credentials are not forwarded."""
    headers = {k: v for k, v in request.headers.items() if k.lower() not in _DROPPED_REQUEST}
    headers["X-Forwarded-Host"] = request.host
    return ProxyRequest(request.method, target, urlsplit(target).netloc, headers, request.get_data())


def proxy(request: Request, target: str, session: requests.Session | None = None) -> Response:
    """Send the request to target and relay the upstream response."""
    out = direct(request, target)
    if request.remote_addr:
        prior = request.headers.get("X-Forwarded-For")
        out.headers["X-Forwarded-For"] = f"{prior}, {request.remote_addr}" if prior else request.remote_addr
    session = session or requests.Session()
    upstream = session.request(
        out.method, out.url, headers=out.headers, data=out.body or None, allow_redirects=False
    )
    headers = [(k, v) for k, v in upstream.headers.items() if k.lower() not in _DROPPED_RESPONSE]
    return Response(upstream.content, status=upstream.status_code, headers=headers)