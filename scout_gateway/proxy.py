"""
Generic request forwarding to the analysis backend.

Only the inbound ``content-type`` is carried upstream, the body is read
fully and re-sent unchanged, and the upstream response is streamed back
with its status code preserved. Every response produced here is marked
``cache-control: no-store``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from fastapi import Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from .errors import BadGateway, ServerMisconfigured

logger = logging.getLogger(__name__)

FORWARDED_REQUEST_HEADERS = ("content-type",)
REQUEST_ID_HEADER = "x-request-id"

_base_url_logged = False


@dataclass(frozen=True)
class ForwardTarget:
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[bytes]


def _log_base_url_host(base_url: str) -> None:
    global _base_url_logged
    if _base_url_logged:
        return
    _base_url_logged = True
    try:
        host = httpx.URL(base_url).netloc.decode("ascii") or "invalid"
    except httpx.InvalidURL:
        host = "invalid"
    logger.info(f"API_BASE_URL host: {host}")


def resolve_base_url(raw: Optional[str], plain_text: bool = False) -> str:
    """
    Validate the configured backend base address.

    Args:
        raw: Configured API_BASE_URL value
        plain_text: Render configuration errors as text/plain instead of JSON

    Returns:
        Base address without trailing slashes

    Raises:
        ServerMisconfigured: Address is missing or not an http(s) URL
    """
    if not raw:
        raise ServerMisconfigured("Missing API_BASE_URL environment variable.", plain_text=plain_text)
    if not raw.startswith(("http://", "https://")):
        raise ServerMisconfigured(
            "Invalid API_BASE_URL. It must start with http:// or https://.",
            plain_text=plain_text,
        )
    base_url = raw.rstrip("/")
    _log_base_url_host(base_url)
    return base_url


async def build_forward_target(
    request: Request,
    target_url: str,
    method_override: Optional[str] = None,
    include_body: bool = True,
) -> ForwardTarget:
    headers = {
        name: request.headers[name]
        for name in FORWARDED_REQUEST_HEADERS
        if name in request.headers
    }
    headers[REQUEST_ID_HEADER] = uuid.uuid4().hex
    body = await request.body() if include_body else b""
    return ForwardTarget(
        method=(method_override or request.method).upper(),
        url=target_url,
        headers=headers,
        body=body or None,
    )


def stream_upstream(
    upstream: httpx.Response,
    default_content_type: str,
    extra_headers: Optional[Dict[str, str]] = None,
) -> StreamingResponse:
    """Relay an open streamed upstream response, closing it once fully sent."""
    headers = {
        "content-type": upstream.headers.get("content-type", default_content_type),
        "cache-control": "no-store",
    }
    if extra_headers:
        headers.update(extra_headers)
    return StreamingResponse(
        upstream.aiter_bytes(),
        status_code=upstream.status_code,
        headers=headers,
        background=BackgroundTask(upstream.aclose),
    )


async def forward(
    client: httpx.AsyncClient,
    request: Request,
    target_url: str,
    method_override: Optional[str] = None,
    include_body: bool = True,
) -> StreamingResponse:
    """
    Forward ``request`` to ``target_url`` and stream the answer back.

    Args:
        client: Shared upstream HTTP client
        request: Inbound request
        target_url: Fully qualified backend URL
        method_override: Method to send instead of the inbound one
        include_body: Send the inbound body (False for GET-style routes)

    Raises:
        BadGateway: The backend could not be reached
    """
    target = await build_forward_target(request, target_url, method_override, include_body)
    request_id = target.headers[REQUEST_ID_HEADER]
    try:
        upstream_request = client.build_request(
            target.method,
            target.url,
            headers=target.headers,
            content=target.body,
        )
        upstream = await client.send(upstream_request, stream=True)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        message = str(e) or type(e).__name__
        logger.error(
            f"[proxy] Upstream fetch failed request_id={request_id} "
            f"target={target.url}: {message}"
        )
        raise BadGateway(f"Proxy error: {message}") from e

    logger.info(
        f"[proxy] Upstream response request_id={request_id} target={target.url} "
        f"status={upstream.status_code} "
        f"content_type={upstream.headers.get('content-type', 'unknown')}"
    )
    return stream_upstream(upstream, "text/plain", {REQUEST_ID_HEADER: request_id})
