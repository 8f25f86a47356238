from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request

DEFAULT_ALLOWED_FRAME_HOST = "46.224.249.136:9000"


@dataclass
class GatewayConfig:
    api_base_url: Optional[str] = None
    allowed_frame_host: str = DEFAULT_ALLOWED_FRAME_HOST
    # None disables the upstream timeout entirely
    request_timeout: Optional[float] = None
    host: str = "0.0.0.0"
    port: int = 8765


@dataclass
class GatewayState:
    config: GatewayConfig
    http_client: Optional[httpx.AsyncClient] = None
    owns_client: bool = False

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the shared upstream HTTP client."""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(timeout=self.config.request_timeout)
            self.owns_client = True
        return self.http_client

    async def close(self) -> None:
        if self.http_client is not None and self.owns_client:
            await self.http_client.aclose()
            self.http_client = None
            self.owns_client = False


def get_state(request: Request) -> GatewayState:
    return request.app.state.gateway
