"""
Job routes.

Thin handlers that resolve the backend base address, optionally validate
the inbound payload, and forward to the matching backend resource.
"""

from __future__ import annotations

import logging
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from .proxy import forward, resolve_base_url
from .state import GatewayState, get_state
from .validation import parse_pick_player_body, parse_select_track_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def backend_url(state: GatewayState, *segments: str, plain_text: bool = False) -> str:
    """Join URL-encoded path segments onto the configured backend address."""
    base = resolve_base_url(state.config.api_base_url, plain_text=plain_text)
    path = "/".join(quote(segment, safe="") for segment in segments)
    return f"{base}/{path}"


async def _body_text(request: Request) -> str:
    return (await request.body()).decode("utf-8", errors="replace")


@router.post("")
async def create_job(request: Request, state: GatewayState = Depends(get_state)) -> StreamingResponse:
    target = backend_url(state, "jobs", plain_text=True)
    return await forward(state.get_client(), request, target)


@router.get("/{job_id}")
async def get_job(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id)
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return await forward(state.get_client(), request, target, method_override="GET", include_body=False)


@router.post("/{job_id}/select-track")
async def select_track(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "select-track")
    parse_select_track_body(await _body_text(request))
    return await forward(state.get_client(), request, target, method_override="POST")


@router.post("/{job_id}/pick-player")
async def pick_player(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "pick-player")
    parse_pick_player_body(await _body_text(request))
    return await forward(state.get_client(), request, target, method_override="POST")


@router.post("/{job_id}/analyze-player")
async def analyze_player(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "analyze-player")
    return await forward(state.get_client(), request, target)


@router.post("/{job_id}/enqueue")
async def enqueue_job(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "enqueue")
    return await forward(state.get_client(), request, target, method_override="POST", include_body=False)


@router.post("/{job_id}/player-ref")
async def save_player_ref(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "player-ref")
    logger.info(
        f"[player-ref] forward:start job_id={job_id} target={target} "
        f"content_type={request.headers.get('content-type')} "
        f"content_length={request.headers.get('content-length')}"
    )
    response = await forward(state.get_client(), request, target, method_override="POST")
    logger.info(f"[player-ref] forward:response job_id={job_id} status={response.status_code}")
    return response


@router.get("/{job_id}/candidates")
async def list_candidates(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "candidates")
    return await forward(state.get_client(), request, target, include_body=False)


@router.get("/{job_id}/candidates/{filename}")
async def get_candidate(
    job_id: str,
    filename: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "candidates", filename)
    return await forward(state.get_client(), request, target, method_override="GET", include_body=False)


@router.get("/{job_id}/frames")
async def get_frames(
    job_id: str,
    request: Request,
    count: str = Query("8"),
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "frames")
    target = f"{target}?{urlencode({'count': count})}"
    return await forward(state.get_client(), request, target, include_body=False)


@router.get("/{job_id}/frames/list")
async def list_frames(
    job_id: str,
    request: Request,
    state: GatewayState = Depends(get_state),
) -> StreamingResponse:
    target = backend_url(state, "jobs", job_id, "frames", "list")
    return await forward(state.get_client(), request, target, method_override="GET", include_body=False)
