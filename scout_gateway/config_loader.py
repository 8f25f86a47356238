"""Configuration loader for the scout gateway - loads from environment variables."""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

from .state import DEFAULT_ALLOWED_FRAME_HOST, GatewayConfig


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    return float(raw)


def load_config_from_env() -> GatewayConfig:
    """
    Load GatewayConfig from environment variables.

    Loads .env file if present and reads configuration values once; the
    application never re-reads the environment afterwards.

    Environment Variables:
        API_BASE_URL: Analysis backend base address (no default; unset means
            every job route answers 500)
        ALLOWED_FRAME_HOST: The only host:port the frame relay may fetch from
            (default: 46.224.249.136:9000)
        REQUEST_TIMEOUT: Upstream timeout in seconds (default: unset, no timeout)
        HOST: Server host (default: 0.0.0.0)
        PORT: Server port (default: 8765)

    Returns:
        GatewayConfig object with values from environment
    """
    load_dotenv()

    return GatewayConfig(
        api_base_url=os.getenv("API_BASE_URL") or None,
        allowed_frame_host=os.getenv("ALLOWED_FRAME_HOST", DEFAULT_ALLOWED_FRAME_HOST),
        request_timeout=_optional_float(os.getenv("REQUEST_TIMEOUT")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8765")),
    )
