"""Rewrites frame URLs that still point at the legacy object store address."""

from __future__ import annotations

import httpx

LEGACY_FRAME_HOSTNAME = "46.224.249.136"
LEGACY_FRAME_PORT = 9000
PUBLIC_FRAME_HOST = "https://s3.nextgroupintl.com"


def normalize_frame_url(url: str, public_host: str = PUBLIC_FRAME_HOST) -> str:
    if not url:
        return url
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return url
    if parsed.host != LEGACY_FRAME_HOSTNAME or parsed.port not in (LEGACY_FRAME_PORT, None):
        return url

    rewritten = public_host.rstrip("/") + parsed.raw_path.decode("ascii")
    if parsed.fragment:
        rewritten = f"{rewritten}#{parsed.fragment}"
    return rewritten
