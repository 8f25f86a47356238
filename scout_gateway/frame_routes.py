"""
Frame image relay.

``GET /api/frame-proxy?url=...`` fetches an image from the single
allow-listed frame host and streams it back to the browser. Hosts are
compared by exact ``hostname[:port]`` string equality.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from .errors import BadGateway, BadRequest, Forbidden
from .proxy import stream_upstream
from .state import GatewayState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["frames"])

# schemes whose URLs cannot be parsed without a host; others may have none
HOST_REQUIRED_SCHEMES = {"http", "https", "ws", "wss", "ftp"}


def url_host(url: httpx.URL) -> str:
    """Host as ``hostname`` or ``hostname:port``; default ports are omitted."""
    host = url.raw_host.decode("ascii")
    if ":" in host:
        host = f"[{host}]"
    if url.port is None:
        return host
    return f"{host}:{url.port}"


def parse_relay_target(raw: Optional[str], allowed_host: str) -> httpx.URL:
    """
    Parse and authorize the relay target.

    Raises:
        BadRequest: ``url`` is missing, unparsable or has no scheme
        Forbidden: The URL's host is not the allow-listed host
    """
    if not raw:
        raise BadRequest("Missing url")
    try:
        target = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise BadRequest("Invalid url") from e
    if not target.scheme:
        raise BadRequest("Invalid url")
    if target.scheme in HOST_REQUIRED_SCHEMES and not target.raw_host:
        raise BadRequest("Invalid url")

    host = url_host(target)
    if host != allowed_host:
        logger.warning(f"[frame-proxy] rejected host {host!r}")
        raise Forbidden("Host not allowed")
    return target


@router.get("/frame-proxy")
async def frame_proxy(
    url: Optional[str] = Query(None),
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = parse_relay_target(url, state.config.allowed_frame_host)
    client = state.get_client()
    try:
        upstream = await client.send(client.build_request("GET", target), stream=True)
    except httpx.HTTPError as e:
        message = str(e) or "Unknown error"
        logger.error(f"[frame-proxy] fetch failed for {target}: {message}")
        raise BadGateway(message) from e

    if not upstream.is_success:
        logger.error(f"[frame-proxy] upstream returned {upstream.status_code} for {target}")
        await upstream.aclose()
        raise BadGateway("Upstream fetch failed")

    return stream_upstream(upstream, "image/jpeg")
