from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import Response
from pydantic import BaseModel

from .errors import GatewayError
from .frame_routes import router as frame_router
from .job_routes import router as job_router
from .state import GatewayConfig, GatewayState, get_state

logger = logging.getLogger(__name__)

__all__ = ["GatewayConfig", "GatewayState", "create_app"]


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    backend_configured: bool
    allowed_frame_host: str


def create_app(
    config: Optional[GatewayConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        config: Gateway settings; defaults leave the backend address unset
        http_client: Upstream client to use instead of a lazily created one.
            The caller keeps ownership and must close it.
    """
    cfg = config or GatewayConfig()
    state = GatewayState(config=cfg, http_client=http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ANN001
        if not cfg.api_base_url:
            logger.warning("API_BASE_URL is not set; job routes will answer 500")
        logger.info(f"Frame relay allow-listed host: {cfg.allowed_frame_host}")
        try:
            yield
        finally:
            await state.close()

    app = FastAPI(title="Scout Gateway", version="0.1.0", lifespan=lifespan)
    app.state.gateway = state

    app.include_router(frame_router)
    app.include_router(job_router)

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> Response:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return exc.to_response()

    @app.get("/health", response_model=HealthResponse)
    async def health_check(state: GatewayState = Depends(get_state)) -> HealthResponse:
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            backend_configured=bool(state.config.api_base_url),
            allowed_frame_host=state.config.allowed_frame_host,
        )

    return app
